import asyncio
from typing import Dict, Iterable, List

from schoolfin.domain import LedgerRecord
from schoolfin.functional import Either
from schoolfin.services import ReportService


async def monthly_reports(service: ReportService, records: Iterable[LedgerRecord], years: List[int], locale: str = "en") -> Dict[int, Either]:
    """Run one monthly report per BS year concurrently.

    Each year is an independent request: a year outside the calendar table
    yields a Left for that year while the others still complete.
    """
    snapshot = tuple(records)

    async def year_report(year: int) -> tuple[int, Either]:
        result = service.monthly_report(snapshot, year, locale)
        await asyncio.sleep(0)
        return year, result

    results = await asyncio.gather(*(year_report(y) for y in years))
    return dict(results)
