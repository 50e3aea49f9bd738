import json
from dataclasses import replace
from decimal import Decimal
from typing import Iterable

from schoolfin.domain import LedgerKind, LedgerRecord


def record_from_dict(data: dict) -> LedgerRecord:
    return LedgerRecord(
        id=str(data["id"]),
        amount=Decimal(str(data["amount"])),
        kind=LedgerKind(str(data["kind"]).upper()),
        category=data.get("category") or None,
        occurred_at=data["occurred_at"],
        note=data.get("note", ""),
    )


def record_to_dict(r: LedgerRecord) -> dict:
    occurred_at = r.occurred_at if isinstance(r.occurred_at, str) else r.occurred_at.isoformat()
    return {
        "id": r.id,
        "amount": str(r.amount),
        "kind": r.kind.value,
        "category": r.category,
        "occurred_at": occurred_at,
        "note": r.note,
    }


def load_ledger(path: str) -> tuple[LedgerRecord, ...]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return tuple(record_from_dict(r) for r in data["records"])


def dump_ledger(records: Iterable[LedgerRecord], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"records": [record_to_dict(r) for r in records]}, f, ensure_ascii=False, indent=2)


def add_record(records: tuple[LedgerRecord, ...], r: LedgerRecord) -> tuple[LedgerRecord, ...]:
    if any(existing.id == r.id for existing in records):
        raise ValueError(f"Ledger record {r.id} already exists")
    return records + (r,)


def correct_record(records: tuple[LedgerRecord, ...], record_id: str, **changes) -> tuple[LedgerRecord, ...]:
    """Administrative correction: a new tuple with one record replaced."""
    if not any(r.id == record_id for r in records):
        raise KeyError(record_id)
    return tuple(replace(r, **changes) if r.id == record_id else r for r in records)


def income_records(records: tuple[LedgerRecord, ...]) -> tuple[LedgerRecord, ...]:
    return tuple(filter(lambda r: r.kind is LedgerKind.INCOME, records))


def expense_records(records: tuple[LedgerRecord, ...]) -> tuple[LedgerRecord, ...]:
    return tuple(filter(lambda r: r.kind is LedgerKind.EXPENSE, records))
