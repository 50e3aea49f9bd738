from decimal import Decimal

import pytest

from schoolfin.aggregation import aggregate
from schoolfin.categories import DEFAULT_COLOR_CLASS, CategoryCatalog, default_catalog, normalize_code
from schoolfin.convert import BS_MONTHS_EN, BS_MONTHS_NE
from schoolfin.domain import CategoryStyle, Granularity, LedgerKind, LedgerRecord
from schoolfin.reports import (
    breakdown_to_frame,
    profit_loss,
    records_to_frame,
    series_to_frame,
    to_category_breakdown,
    to_monthly_series,
)

INCOME = LedgerKind.INCOME
EXPENSE = LedgerKind.EXPENSE


def make_rec(id, amount, kind, occurred_at, category=None):
    return LedgerRecord(id=id, amount=Decimal(amount), kind=kind, category=category, occurred_at=occurred_at)


def test_empty_year_series_is_twelve_zeros():
    series = to_monthly_series(aggregate([], Granularity.MONTH, bs_year=2081))
    assert len(series) == 12
    assert [p.label for p in series] == list(BS_MONTHS_EN)
    assert [p.month for p in series] == list(range(1, 13))
    assert all(p.income == 0 and p.expense == 0 for p in series)


def test_series_places_amounts_by_bs_month():
    records = [
        make_rec("a", "5000", INCOME, "2024-04-15T00:00:00Z"),
        make_rec("b", "2000", EXPENSE, "2024-04-20T00:00:00Z"),
        make_rec("c", "800", EXPENSE, "2025-04-13T00:00:00Z"),
    ]
    series = to_monthly_series(aggregate(records, Granularity.MONTH, bs_year=2081), locale="ne")
    assert series[0].label == BS_MONTHS_NE[0]
    assert (series[0].income, series[0].expense, series[0].net) == (Decimal("5000"), Decimal("2000"), Decimal("3000"))
    assert series[11].expense == Decimal("800")
    assert all(p.income == 0 and p.expense == 0 for p in series[1:11])


def test_series_year_inferred_from_single_year_summary():
    summary = aggregate([make_rec("a", "1", INCOME, "2024-06-01")], Granularity.MONTH)
    assert to_monthly_series(summary)[1].income == Decimal("1")


def test_series_year_must_be_unambiguous():
    summary = aggregate(
        [make_rec("a", "1", INCOME, "2024-04-12"), make_rec("b", "1", INCOME, "2024-04-13")],
        Granularity.MONTH,
    )
    with pytest.raises(ValueError):
        to_monthly_series(summary)
    assert len(to_monthly_series(summary, bs_year=2080)) == 12


def test_series_needs_month_summary():
    with pytest.raises(ValueError):
        to_monthly_series(aggregate([], Granularity.DAY), bs_year=2081)


def test_category_breakdown_labels_and_order():
    records = [
        make_rec("1", "300", EXPENSE, "2024-05-01", "DAY_MEAL"),
        make_rec("2", "200", EXPENSE, "2024-05-02", "DAY_MEAL"),
        make_rec("3", "500", EXPENSE, "2024-05-03", "BOOK_FAIR"),
        make_rec("4", "50", EXPENSE, "2024-05-04", None),
        make_rec("5", "9999", INCOME, "2024-05-04", "DAY_MEAL"),
    ]
    breakdown = to_category_breakdown(records, EXPENSE, default_catalog())

    assert [c.category for c in breakdown] == ["BOOK_FAIR", "DAY_MEAL", "OTHER"]
    book, meal, other = breakdown
    assert book.label == "Book fair"
    assert book.color_class == DEFAULT_COLOR_CLASS
    assert meal.label == "दिवा खाजा"
    assert meal.color_class == "bg-blue-100 text-blue-800"
    assert (meal.total, meal.count) == (Decimal("500"), 2)
    assert other.label == "अन्य"


def test_injected_catalog():
    catalog = CategoryCatalog({INCOME: {"EXAM": CategoryStyle("Exam fees", "bg-rose-100 text-rose-800")}})
    breakdown = to_category_breakdown([make_rec("1", "10", INCOME, "2024-05-01", "EXAM")], INCOME, catalog)
    assert breakdown[0].label == "Exam fees"
    assert catalog.label(EXPENSE, "EXAM") == "Exam"


def test_normalize_code():
    assert normalize_code("TEACHER_SALARY") == "Teacher salary"
    assert normalize_code("OTHER") == "Other"


def test_profit_loss():
    records = [
        make_rec("a", "100", INCOME, "2024-04-15"),
        make_rec("b", "250", EXPENSE, "2024-06-15"),
    ]
    pl = profit_loss(aggregate(records, Granularity.MONTH))
    assert (pl.income, pl.expense, pl.net) == (Decimal("100"), Decimal("250"), Decimal("-150"))
    assert pl.is_profit is False


def test_frames():
    records = [
        make_rec("a", "100", INCOME, "2024-04-15", "EXAM"),
        make_rec("b", "40", EXPENSE, "broken", None),
    ]
    series_df = series_to_frame(to_monthly_series(aggregate(records, Granularity.MONTH, bs_year=2081)))
    assert list(series_df.columns) == ["month", "label", "income", "expense", "net"]
    assert series_df.loc[0, "income"] == 100.0
    assert len(series_df) == 12

    breakdown_df = breakdown_to_frame(to_category_breakdown(records, INCOME, default_catalog()))
    assert breakdown_df.loc[0, "label"] == "परीक्षा"

    records_df = records_to_frame(records)
    assert records_df["date"].isna().tolist() == [False, True]
    assert records_df.loc[1, "category"] == "OTHER"
