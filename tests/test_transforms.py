import os
from datetime import date
from decimal import Decimal

import pytest

from schoolfin.domain import BSDate, LedgerKind, LedgerRecord
from schoolfin.filters import by_amount_range, by_bs_range, by_category, by_kind, chunked, iter_records
from schoolfin.transforms import (
    add_record,
    correct_record,
    dump_ledger,
    expense_records,
    income_records,
    load_ledger,
)

SEED = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "ledger.json")


def make_rec(id, amount, kind, occurred_at, category=None):
    return LedgerRecord(id=id, amount=Decimal(amount), kind=kind, category=category, occurred_at=occurred_at)


def test_load_seed_ledger():
    records = load_ledger(SEED)
    assert len(records) >= 10
    assert len(income_records(records)) + len(expense_records(records)) == len(records)
    assert all(isinstance(r.amount, Decimal) for r in records)


def test_dump_and_load_round_trip(tmp_path):
    records = (
        make_rec("a", "10.50", LedgerKind.INCOME, date(2024, 4, 15), "EXAM"),
        make_rec("b", "3", LedgerKind.EXPENSE, "2024-04-16T00:00:00Z"),
    )
    path = str(tmp_path / "ledger.json")
    dump_ledger(records, path)
    loaded = load_ledger(path)
    assert [r.id for r in loaded] == ["a", "b"]
    assert loaded[0].amount == Decimal("10.50")
    assert loaded[0].occurred_at == "2024-04-15"
    assert loaded[1].category is None


def test_record_validation():
    with pytest.raises(ValueError):
        make_rec("neg", "-1", LedgerKind.EXPENSE, "2024-04-15")
    for amount in ("NaN", "Infinity", "-Infinity"):
        with pytest.raises(ValueError):
            make_rec("odd", amount, LedgerKind.INCOME, "2024-04-15")
    r = LedgerRecord(id="x", amount=5, kind="INCOME", category=None, occurred_at="2024-04-15")
    assert r.amount == Decimal("5")
    assert r.kind is LedgerKind.INCOME


def test_add_record_is_immutable():
    r1 = make_rec("a", "1", LedgerKind.INCOME, "2024-04-15")
    r2 = make_rec("b", "2", LedgerKind.EXPENSE, "2024-04-16")
    records = (r1,)
    new_records = add_record(records, r2)
    assert len(records) == 1
    assert len(new_records) == 2
    with pytest.raises(ValueError):
        add_record(new_records, r1)


def test_correct_record():
    records = (make_rec("a", "1", LedgerKind.INCOME, "2024-04-15"),)
    corrected = correct_record(records, "a", amount=Decimal("2"))
    assert corrected[0].amount == Decimal("2")
    assert records[0].amount == Decimal("1")
    with pytest.raises(KeyError):
        correct_record(records, "missing", amount=Decimal("2"))
    with pytest.raises(ValueError):
        correct_record(records, "a", amount=Decimal("-2"))


def test_filters():
    records = (
        make_rec("a", "100", LedgerKind.INCOME, "2024-04-12", "EXAM"),
        make_rec("b", "200", LedgerKind.EXPENSE, "2024-04-13", "SPORTS"),
        make_rec("c", "300", LedgerKind.EXPENSE, "2024-05-20", "SPORTS"),
        make_rec("d", "400", LedgerKind.EXPENSE, "broken", "SPORTS"),
    )
    assert [r.id for r in iter_records(records, by_kind(LedgerKind.EXPENSE), by_category("SPORTS"))] == ["b", "c", "d"]
    assert [r.id for r in iter_records(records, by_amount_range(Decimal("150"), Decimal("350")))] == ["b", "c"]

    baisakh = by_bs_range(BSDate(2081, 1, 1), BSDate(2081, 1, 15))
    assert [r.id for r in iter_records(records, baisakh)] == ["b"]


def test_chunked():
    assert list(chunked(range(5), 2)) == [(0, 1), (2, 3), (4,)]
    assert list(chunked([], 3)) == []
    with pytest.raises(ValueError):
        list(chunked([1], 0))
