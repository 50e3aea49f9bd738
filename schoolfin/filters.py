from datetime import date
from decimal import Decimal
from itertools import islice
from typing import Callable, Iterable, Iterator, Optional

from schoolfin.bucketing import to_calendar_date
from schoolfin.calendar_table import CalendarTable
from schoolfin.convert import to_ad
from schoolfin.domain import BSDate, LedgerKind, LedgerRecord

Predicate = Callable[[LedgerRecord], bool]


def iter_records(records: Iterable[LedgerRecord], *preds: Predicate) -> Iterator[LedgerRecord]:
    for r in records:
        if all(p(r) for p in preds):
            yield r


def chunked(records: Iterable[LedgerRecord], size: int) -> Iterator[tuple[LedgerRecord, ...]]:
    if size < 1:
        raise ValueError("chunk size must be positive")
    it = iter(records)
    while True:
        chunk = tuple(islice(it, size))
        if not chunk:
            return
        yield chunk


def by_kind(kind: LedgerKind) -> Predicate:
    kind = LedgerKind(kind)

    def _filter(r: LedgerRecord) -> bool:
        return r.kind is kind

    return _filter


def by_category(code: Optional[str]) -> Predicate:
    def _filter(r: LedgerRecord) -> bool:
        return r.category == code

    return _filter


def by_amount_range(min: Decimal, max: Decimal) -> Predicate:
    def _filter(r: LedgerRecord) -> bool:
        return min <= r.amount <= max

    return _filter


def by_date_range(start: Optional[date], end: Optional[date]) -> Predicate:
    """Inclusive AD date range; either side may be open."""
    def _filter(r: LedgerRecord) -> bool:
        try:
            day = to_calendar_date(r.occurred_at)
        except (ValueError, TypeError):
            return False
        if start is not None and day < start:
            return False
        if end is not None and day > end:
            return False
        return True

    return _filter


def by_bs_range(start: Optional[BSDate], end: Optional[BSDate], table: Optional[CalendarTable] = None) -> Predicate:
    # bounds are converted once; conversion errors surface to the caller here
    ad_start = to_ad(start, table) if start is not None else None
    ad_end = to_ad(end, table) if end is not None else None
    return by_date_range(ad_start, ad_end)
