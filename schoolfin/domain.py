from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Mapping, Optional, Union

from schoolfin.errors import DataQualityWarning, InvalidBSDateError

Timestamp = Union[datetime, date, str]


class LedgerKind(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    TOTAL = "total"


@dataclass(frozen=True)
class LedgerRecord:
    id: str
    amount: Decimal
    kind: LedgerKind
    category: Optional[str]      # e.g. "TEACHER_SALARY", None when unclassified
    occurred_at: Timestamp       # AD instant, UTC or explicit offset
    note: str = ""

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if not self.amount.is_finite() or self.amount < 0:
            raise ValueError(f"Ledger amount must be finite and non-negative, got {self.amount}")
        if not isinstance(self.kind, LedgerKind):
            object.__setattr__(self, "kind", LedgerKind(self.kind))


@dataclass(frozen=True, order=True)
class BSDate:
    year: int
    month: int   # 1 = Baisakh .. 12 = Chaitra
    day: int

    def __post_init__(self):
        if not 1 <= self.month <= 12:
            raise InvalidBSDateError(self.year, self.month, self.day, "month must be in 1..12")
        if not 1 <= self.day <= 32:
            raise InvalidBSDateError(self.year, self.month, self.day, "day must be in 1..32")

    def isoformat(self) -> str:
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def __str__(self) -> str:
        return self.isoformat()


@dataclass(frozen=True, order=True)
class Bucket:
    granularity: Granularity
    key: tuple

    @property
    def label(self) -> str:
        if self.granularity is Granularity.TOTAL:
            return "total"
        if self.granularity is Granularity.WEEK:
            return f"{self.key[0]:04d}-W{self.key[1]:02d}"
        return "-".join(f"{part:02d}" for part in self.key)


@dataclass(frozen=True)
class BucketTotals:
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class AggregateSummary:
    granularity: Granularity
    totals: Mapping[Bucket, BucketTotals]
    bs_year: Optional[int] = None
    warnings: tuple[DataQualityWarning, ...] = field(default=(), compare=False)

    def buckets(self) -> list[Bucket]:
        return sorted(self.totals)

    def get(self, bucket: Bucket) -> BucketTotals:
        return self.totals.get(bucket, BucketTotals())


@dataclass(frozen=True)
class MonthlyPoint:
    month: int
    label: str
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense


@dataclass(frozen=True)
class CategoryStyle:
    label: str
    color_class: str


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    label: str
    color_class: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class ProfitLoss:
    income: Decimal
    expense: Decimal

    @property
    def net(self) -> Decimal:
        return self.income - self.expense

    @property
    def is_profit(self) -> bool:
        return self.net >= 0


@dataclass(frozen=True)
class PeriodTotals:
    revenue: Decimal
    expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.revenue - self.expenses
