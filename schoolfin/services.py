from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, Optional

from schoolfin.aggregation import aggregate, period_summary
from schoolfin.calendar_table import CalendarTable, default_table
from schoolfin.categories import CategoryCatalog, default_catalog
from schoolfin.domain import BSDate, Granularity, LedgerKind, LedgerRecord
from schoolfin.errors import CalendarError
from schoolfin.filters import by_bs_range, iter_records
from schoolfin.functional import Either, Left, Right, pipe
from schoolfin.logging_config import get_logger
from schoolfin.reports import profit_loss, to_category_breakdown, to_monthly_series

logger = get_logger("services")


class ReportService:
    """Facade the dashboard and exports call for finance reports.

    Request-level calendar failures (a year or range the table does not
    cover) come back as ``Left`` with a machine-readable error, never as a
    zeroed report.
    """

    def __init__(self, table: Optional[CalendarTable] = None, catalog: Optional[CategoryCatalog] = None):
        self.table = table or default_table()
        self.catalog = catalog or default_catalog()

    def monthly_report(self, records: Iterable[LedgerRecord], bs_year: int, locale: str = "en") -> Either[dict, Dict[str, Any]]:
        logger.debug("Monthly report requested", extra={"bs_year": bs_year})
        try:
            summary = aggregate(records, Granularity.MONTH, table=self.table, bs_year=bs_year)
        except CalendarError as e:
            logger.warning("Monthly report failed", extra={"bs_year": bs_year, "error": e.code})
            return Left({**e.to_dict(), "bs_year": bs_year})

        # other years' buckets are outside this report
        in_year = {b: t for b, t in summary.totals.items() if b.key[0] == bs_year}
        year_summary = replace(summary, totals=in_year)
        return Right({
            "bs_year": bs_year,
            "series": to_monthly_series(year_summary, locale=locale),
            "profit_loss": profit_loss(year_summary),
            "warnings": [w.to_dict() for w in summary.warnings],
        })

    def category_report(self, records: Iterable[LedgerRecord], kind: LedgerKind) -> Dict[str, Any]:
        breakdown = to_category_breakdown(records, kind, self.catalog)
        return {
            "kind": LedgerKind(kind).value,
            "breakdown": breakdown,
            "total": sum((c.total for c in breakdown), Decimal("0")),
            "count": sum(c.count for c in breakdown),
        }

    def summary_report(self, records: Iterable[LedgerRecord], today: date) -> Either[dict, Dict[str, Any]]:
        """Day, week, month and overall totals around ``today``."""
        try:
            return Right(period_summary(records, today, table=self.table))
        except CalendarError as e:
            logger.warning("Summary report failed", extra={"today": today.isoformat(), "error": e.code})
            return Left({**e.to_dict(), "today": today.isoformat()})

    def range_report(
        self,
        records: Iterable[LedgerRecord],
        start: Optional[BSDate] = None,
        end: Optional[BSDate] = None,
    ) -> Either[dict, Dict[str, Any]]:
        """Finance report for an inclusive BS date range."""
        if start is not None and end is not None and start > end:
            return Left({"error": "invalid_range", "message": f"Range start {start} is after end {end}"})
        try:
            in_range = by_bs_range(start, end, self.table)
        except CalendarError as e:
            return Left(e.to_dict())

        selected = pipe(records, lambda rs: iter_records(rs, in_range), tuple)
        summary = aggregate(selected, Granularity.TOTAL, table=self.table)
        return Right({
            "records": selected,
            "income": to_category_breakdown(selected, LedgerKind.INCOME, self.catalog),
            "expense": to_category_breakdown(selected, LedgerKind.EXPENSE, self.catalog),
            "profit_loss": profit_loss(summary),
            "filters": {
                "from_bs": str(start) if start is not None else None,
                "to_bs": str(end) if end is not None else None,
            },
        })
