from datetime import date
from decimal import Decimal

import pytest

from schoolfin.async_reports import monthly_reports
from schoolfin.domain import BSDate, LedgerKind, LedgerRecord
from schoolfin.functional import Left, Right, safe_to_ad, safe_to_bs
from schoolfin.services import ReportService

INCOME = LedgerKind.INCOME
EXPENSE = LedgerKind.EXPENSE


def make_rec(id, amount, kind, occurred_at, category=None):
    return LedgerRecord(id=id, amount=Decimal(amount), kind=kind, category=category, occurred_at=occurred_at)


def ledger():
    return (
        make_rec("p1", "5000", INCOME, "2024-04-15T00:00:00Z", "EXAM"),
        make_rec("e1", "2000", EXPENSE, "2024-04-20T00:00:00Z", "ADMIN_STATIONERY"),
        make_rec("p2", "700", INCOME, "2024-04-12T00:00:00Z", "CERTIFICATE"),
        make_rec("e2", "300", EXPENSE, "2024-07-20T00:00:00Z", "ELECTRICITY"),
        make_rec("bad", "1", EXPENSE, "garbage", "OTHER"),
    )


def test_monthly_report_right():
    result = ReportService().monthly_report(ledger(), 2081)
    assert result.is_right()
    report = result.get_or_else(None)
    assert report["bs_year"] == 2081
    assert len(report["series"]) == 12
    assert report["series"][0].income == Decimal("5000")
    # the 2080 payment is not part of the 2081 report
    assert report["profit_loss"].income == Decimal("5000")
    assert report["profit_loss"].expense == Decimal("2300")
    assert [w["record_id"] for w in report["warnings"]] == ["bad"]


def test_monthly_report_unsupported_year_is_explicit_error():
    result = ReportService().monthly_report(ledger(), 1500)
    assert result.is_left()
    error = result.get_error()
    assert error["error"] == "unsupported_era"
    assert error["bs_year"] == 1500


def test_category_report():
    report = ReportService().category_report(ledger(), EXPENSE)
    assert report["kind"] == "EXPENSE"
    assert report["total"] == Decimal("2301")
    assert report["count"] == 3


def test_summary_report():
    result = ReportService().summary_report(ledger(), date(2024, 4, 20))
    assert result.is_right()
    totals = result.get_or_else(None)
    assert totals["day"].expenses == Decimal("2000")
    assert totals["month"].revenue == Decimal("5000")


def test_summary_report_outside_table_is_explicit_error():
    result = ReportService().summary_report(ledger(), date(1800, 1, 1))
    assert result.is_left()
    error = result.get_error()
    assert error["error"] == "unsupported_era"
    assert error["today"] == "1800-01-01"


def test_range_report():
    result = ReportService().range_report(ledger(), BSDate(2081, 1, 1), BSDate(2081, 1, 30))
    assert result.is_right()
    report = result.get_or_else(None)
    assert {r.id for r in report["records"]} == {"p1", "e1"}
    assert report["profit_loss"].net == Decimal("3000")
    assert [c.category for c in report["income"]] == ["EXAM"]
    assert report["filters"] == {"from_bs": "2081-01-01", "to_bs": "2081-01-30"}


def test_range_report_open_ended():
    report = ReportService().range_report(ledger(), start=BSDate(2081, 3, 1)).get_or_else(None)
    assert [r.id for r in report["records"]] == ["e2"]


def test_range_report_errors():
    svc = ReportService()
    reversed_range = svc.range_report(ledger(), BSDate(2081, 2, 1), BSDate(2081, 1, 1))
    assert reversed_range.get_error()["error"] == "invalid_range"
    bad_day = svc.range_report(ledger(), BSDate(2081, 1, 32), None)
    assert bad_day.is_left()
    assert bad_day.get_error()["error"] == "invalid_bs_date"


def test_safe_conversions():
    assert safe_to_bs(date(2024, 4, 13)) == Right(BSDate(2081, 1, 1))
    assert safe_to_ad(BSDate(2081, 1, 1)) == Right(date(2024, 4, 13))
    assert safe_to_bs(date(1800, 1, 1)).get_error()["error"] == "unsupported_era"
    assert isinstance(safe_to_ad(BSDate(1800, 1, 1)), Left)


def test_either_map_and_bind():
    assert Right(2).map(lambda x: x * 2) == Right(4)
    assert Left("e").map(lambda x: x * 2) == Left("e")
    assert Right(2).bind(lambda x: Left("boom")).get_error() == "boom"
    assert Left("e").get_or_else(0) == 0


@pytest.mark.asyncio
async def test_monthly_reports_are_independent():
    results = await monthly_reports(ReportService(), ledger(), [2080, 2081, 1500])
    assert results[2080].is_right()
    assert results[2080].get_or_else(None)["series"][11].income == Decimal("700")
    assert results[2081].is_right()
    assert results[1500].is_left()
