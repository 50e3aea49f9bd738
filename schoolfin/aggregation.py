from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from schoolfin.bucketing import bucket_for, bucket_for_date
from schoolfin.calendar_table import CalendarTable, default_table
from schoolfin.domain import (
    AggregateSummary,
    Bucket,
    BucketTotals,
    Granularity,
    LedgerKind,
    LedgerRecord,
    PeriodTotals,
)
from schoolfin.errors import DataQualityWarning, UnsupportedEraError
from schoolfin.logging_config import get_logger

__all__ = ["Aggregator", "aggregate", "aggregate_chunks", "period_summary"]

logger = get_logger("aggregation")

ZERO = Decimal("0")


class Aggregator:
    """Incremental income/expense accumulator keyed by reporting bucket.

    Feed records with ``add``/``extend`` as they arrive (a whole query result
    or successive pages) and take ``summary()`` whenever a snapshot is needed.
    Records that cannot be bucketed are skipped with a DataQualityWarning.
    """

    def __init__(self, granularity: Granularity, *, table: Optional[CalendarTable] = None, bs_year: Optional[int] = None):
        self.granularity = Granularity(granularity)
        self.table = table or default_table()
        self.bs_year = bs_year
        self._income: dict[Bucket, Decimal] = defaultdict(lambda: ZERO)
        self._expense: dict[Bucket, Decimal] = defaultdict(lambda: ZERO)
        self._warnings: list[DataQualityWarning] = []

        if bs_year is not None:
            if self.granularity is not Granularity.MONTH:
                raise ValueError("bs_year seeding only applies to MONTH granularity")
            self.table.year_info(bs_year)
            for month in range(1, 13):
                bucket = Bucket(Granularity.MONTH, (bs_year, month))
                self._income[bucket] = ZERO
                self._expense[bucket] = ZERO

    def add(self, record: LedgerRecord) -> bool:
        """Accumulate one record; return False when it was skipped."""
        try:
            bucket = bucket_for(record, self.granularity, self.table)
        except (ValueError, TypeError, UnsupportedEraError) as e:
            warning = DataQualityWarning(record.id, str(e))
            self._warnings.append(warning)
            logger.warning(
                "Skipping ledger record with unusable date",
                extra={"record_id": record.id, "reason": str(e), "granularity": self.granularity.value},
            )
            return False

        if record.kind is LedgerKind.INCOME:
            self._income[bucket] += record.amount
        else:
            self._expense[bucket] += record.amount
        return True

    def extend(self, records: Iterable[LedgerRecord]) -> "Aggregator":
        for record in records:
            self.add(record)
        return self

    @property
    def warnings(self) -> tuple[DataQualityWarning, ...]:
        return tuple(self._warnings)

    def summary(self) -> AggregateSummary:
        totals = {
            bucket: BucketTotals(income=self._income[bucket], expense=self._expense[bucket])
            for bucket in sorted(self._income.keys() | self._expense.keys())
        }
        return AggregateSummary(
            granularity=self.granularity,
            totals=totals,
            bs_year=self.bs_year,
            warnings=self.warnings,
        )


def aggregate(
    records: Iterable[LedgerRecord],
    granularity: Granularity,
    *,
    table: Optional[CalendarTable] = None,
    bs_year: Optional[int] = None,
) -> AggregateSummary:
    """Sum income and expense per bucket.

    With MONTH granularity and ``bs_year`` the twelve months of that year are
    always present, zero when empty.
    """
    return Aggregator(granularity, table=table, bs_year=bs_year).extend(records).summary()


def aggregate_chunks(
    chunks: Iterable[Iterable[LedgerRecord]],
    granularity: Granularity,
    *,
    table: Optional[CalendarTable] = None,
    bs_year: Optional[int] = None,
) -> AggregateSummary:
    acc = Aggregator(granularity, table=table, bs_year=bs_year)
    for chunk in chunks:
        acc.extend(chunk)
    return acc.summary()


def period_summary(
    records: Iterable[LedgerRecord],
    today: date,
    *,
    table: Optional[CalendarTable] = None,
) -> dict[str, PeriodTotals]:
    """Revenue/expenses for today's AD day, AD week, BS month, and overall."""
    table = table or default_table()
    aggregators = {
        "day": Aggregator(Granularity.DAY, table=table),
        "week": Aggregator(Granularity.WEEK, table=table),
        "month": Aggregator(Granularity.MONTH, table=table),
        "total": Aggregator(Granularity.TOTAL, table=table),
    }
    for record in records:
        for acc in aggregators.values():
            acc.add(record)

    result = {}
    for name, acc in aggregators.items():
        totals = acc.summary().get(bucket_for_date(today, acc.granularity, table))
        result[name] = PeriodTotals(revenue=totals.income, expenses=totals.expense)
    return result
