from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Optional, Sequence

import pandas as pd

from schoolfin.bucketing import to_calendar_date
from schoolfin.categories import OTHER, CategoryCatalog, default_catalog
from schoolfin.convert import month_name
from schoolfin.domain import (
    AggregateSummary,
    Bucket,
    CategoryTotal,
    Granularity,
    LedgerKind,
    LedgerRecord,
    MonthlyPoint,
    ProfitLoss,
)

__all__ = [
    "to_monthly_series",
    "to_category_breakdown",
    "profit_loss",
    "series_to_frame",
    "breakdown_to_frame",
    "records_to_frame",
]

ZERO = Decimal("0")


def _series_year(summary: AggregateSummary, bs_year: Optional[int]) -> int:
    if bs_year is not None:
        return bs_year
    if summary.bs_year is not None:
        return summary.bs_year
    years = sorted({bucket.key[0] for bucket in summary.totals})
    if len(years) != 1:
        raise ValueError(f"Cannot pick a BS year for the series, summary covers {years or 'no years'}")
    return years[0]


def to_monthly_series(summary: AggregateSummary, bs_year: Optional[int] = None, locale: str = "en") -> list[MonthlyPoint]:
    """Twelve BS month points, Baisakh first, zero-filled."""
    if summary.granularity is not Granularity.MONTH:
        raise ValueError(f"Monthly series needs a MONTH summary, got {summary.granularity.value}")
    year = _series_year(summary, bs_year)

    series = []
    for month in range(1, 13):
        totals = summary.get(Bucket(Granularity.MONTH, (year, month)))
        series.append(
            MonthlyPoint(
                month=month,
                label=month_name(month, locale),
                income=totals.income,
                expense=totals.expense,
            )
        )
    return series


def to_category_breakdown(
    records: Iterable[LedgerRecord],
    kind: LedgerKind,
    catalog: Optional[CategoryCatalog] = None,
) -> list[CategoryTotal]:
    """Totals per category for one ledger kind, largest first."""
    catalog = catalog or default_catalog()
    kind = LedgerKind(kind)
    totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
    counts: dict[str, int] = defaultdict(int)

    for r in records:
        if r.kind is not kind:
            continue
        code = r.category or OTHER
        totals[code] += r.amount
        counts[code] += 1

    ordered = sorted(totals.items(), key=lambda item: (-item[1], item[0]))
    return [
        CategoryTotal(
            category=code,
            label=catalog.label(kind, code),
            color_class=catalog.color_class(kind, code),
            total=total,
            count=counts[code],
        )
        for code, total in ordered
    ]


def profit_loss(summary: AggregateSummary) -> ProfitLoss:
    income = sum((t.income for t in summary.totals.values()), ZERO)
    expense = sum((t.expense for t in summary.totals.values()), ZERO)
    return ProfitLoss(income=income, expense=expense)


def series_to_frame(series: Sequence[MonthlyPoint]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "month": p.month,
                "label": p.label,
                "income": float(p.income),
                "expense": float(p.expense),
                "net": float(p.net),
            }
            for p in series
        ],
        columns=["month", "label", "income", "expense", "net"],
    )


def breakdown_to_frame(breakdown: Sequence[CategoryTotal]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {"category": c.category, "label": c.label, "count": c.count, "total": float(c.total)}
            for c in breakdown
        ],
        columns=["category", "label", "count", "total"],
    )


def records_to_frame(records: Iterable[LedgerRecord]) -> pd.DataFrame:
    rows = []
    for r in records:
        try:
            day = to_calendar_date(r.occurred_at)
        except (ValueError, TypeError):
            day = None
        rows.append({
            "id": r.id,
            "date": pd.Timestamp(day) if day is not None else pd.NaT,
            "kind": r.kind.value,
            "category": r.category or OTHER,
            "amount": float(r.amount),
            "note": r.note,
        })
    return pd.DataFrame(rows, columns=["id", "date", "kind", "category", "amount", "note"])
