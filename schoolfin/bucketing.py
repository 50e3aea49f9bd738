from datetime import date, datetime, timezone
from typing import Optional

from schoolfin.calendar_table import CalendarTable
from schoolfin.convert import to_bs
from schoolfin.domain import Bucket, Granularity, LedgerRecord, Timestamp

__all__ = ["to_calendar_date", "bucket_for", "bucket_for_date"]


def to_calendar_date(value: Timestamp) -> date:
    """Reduce a ledger timestamp to its UTC calendar date.

    Aware datetimes are normalized to UTC; naive ones are taken as UTC already.
    Strings must be ISO-8601 (a trailing ``Z`` is accepted).
    """
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        value = datetime.fromisoformat(text) if "T" in text or " " in text else date.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            try:
                value = value.astimezone(timezone.utc)
            except OverflowError as e:
                raise ValueError(f"Timestamp {value.isoformat()} has no UTC date: {e}") from e
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Unsupported timestamp type {type(value).__name__}")


def bucket_for_date(day: date, granularity: Granularity, table: Optional[CalendarTable] = None) -> Bucket:
    granularity = Granularity(granularity)
    if granularity is Granularity.TOTAL:
        return Bucket(granularity, ())
    if granularity is Granularity.WEEK:
        # weeks are AD weeks starting Monday
        iso_year, iso_week, _ = day.isocalendar()
        return Bucket(granularity, (iso_year, iso_week))

    bs = to_bs(day, table)
    if granularity is Granularity.YEAR:
        return Bucket(granularity, (bs.year,))
    if granularity is Granularity.MONTH:
        return Bucket(granularity, (bs.year, bs.month))
    return Bucket(granularity, (bs.year, bs.month, bs.day))


def bucket_for(record: LedgerRecord, granularity: Granularity, table: Optional[CalendarTable] = None) -> Bucket:
    return bucket_for_date(to_calendar_date(record.occurred_at), granularity, table)
