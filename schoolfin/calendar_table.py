"""Bikram Sambat calendar table.

BS month lengths follow published almanac tables rather than a formula, so
conversion is driven by a table holding, for every supported BS year, the AD
date of 1 Baisakh and the lengths of its twelve months.

The authoritative data comes from the ``nepali-datetime`` library. A JSON
document of the form::

    {"years": {"2081": {"epoch": "2024-04-13", "months": [31, 31, ...]}}}

can replace or extend it when new years are published.
"""

import json
from bisect import bisect_right
from dataclasses import dataclass
from datetime import date, timedelta
from functools import lru_cache
from typing import Iterable, Mapping

from schoolfin.config import Settings
from schoolfin.errors import CalendarTableError, InvalidBSDateError, UnsupportedEraError
from schoolfin.logging_config import get_logger

__all__ = ["YearInfo", "CalendarTable", "load_calendar_table", "default_table"]

logger = get_logger("calendar_table")

MIN_MONTH_LENGTH = 29
MAX_MONTH_LENGTH = 32


@dataclass(frozen=True)
class YearInfo:
    year: int
    epoch: date                 # AD date of 1 Baisakh
    months: tuple[int, ...]     # 12 month lengths, Baisakh first

    @property
    def days(self) -> int:
        return sum(self.months)

    @property
    def end(self) -> date:
        """AD date of the last day of the year (Chaitra end)."""
        return self.epoch + timedelta(days=self.days - 1)


class CalendarTable:
    """Immutable, validated BS year table."""

    def __init__(self, entries: Iterable[YearInfo]):
        ordered = sorted(entries, key=lambda e: e.year)
        if not ordered:
            raise CalendarTableError("Calendar table must contain at least one year")
        _validate(ordered)
        self._years: dict[int, YearInfo] = {e.year: e for e in ordered}
        self._order: tuple[int, ...] = tuple(e.year for e in ordered)
        self._epoch_ordinals: tuple[int, ...] = tuple(e.epoch.toordinal() for e in ordered)

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, year: int) -> bool:
        return year in self._years

    def __iter__(self):
        return (self._years[y] for y in self._order)

    def __repr__(self) -> str:
        return f"CalendarTable({self.first_year}..{self.last_year} BS)"

    @property
    def first_year(self) -> int:
        return self._order[0]

    @property
    def last_year(self) -> int:
        return self._order[-1]

    @property
    def first_date(self) -> date:
        return self._years[self.first_year].epoch

    @property
    def last_date(self) -> date:
        return self._years[self.last_year].end

    def year_info(self, year: int) -> YearInfo:
        try:
            return self._years[year]
        except KeyError:
            raise UnsupportedEraError(year, self.first_year, self.last_year) from None

    def year_for_ordinal(self, ordinal: int) -> YearInfo:
        """Return the BS year containing the AD day with the given ordinal."""
        if ordinal < self._epoch_ordinals[0] or ordinal > self.last_date.toordinal():
            raise UnsupportedEraError(
                date.fromordinal(ordinal), self.first_year, self.last_year, calendar="AD"
            )
        idx = bisect_right(self._epoch_ordinals, ordinal) - 1
        return self._years[self._order[idx]]

    def month_length(self, year: int, month: int) -> int:
        if not 1 <= month <= 12:
            raise InvalidBSDateError(year, month, 1, "month must be in 1..12")
        return self.year_info(year).months[month - 1]

    def validate(self, year: int, month: int, day: int) -> None:
        length = self.month_length(year, month)
        if not 1 <= day <= length:
            raise InvalidBSDateError(
                year, month, day, f"month {month} of {year} has {length} days"
            )

    def extend(self, entries: Iterable[YearInfo]) -> "CalendarTable":
        """Return a new table with ``entries`` added (or replaced)."""
        merged = dict(self._years)
        for entry in entries:
            merged[entry.year] = entry
        return CalendarTable(merged.values())

    def to_mapping(self) -> dict:
        return {
            "years": {
                str(e.year): {"epoch": e.epoch.isoformat(), "months": list(e.months)}
                for e in self
            }
        }

    @classmethod
    def from_mapping(cls, data: Mapping) -> "CalendarTable":
        years = data.get("years", data)
        entries = []
        for year, entry in years.items():
            try:
                entries.append(
                    YearInfo(
                        year=int(year),
                        epoch=date.fromisoformat(entry["epoch"]),
                        months=tuple(int(m) for m in entry["months"]),
                    )
                )
            except (KeyError, TypeError, ValueError) as e:
                raise CalendarTableError(f"Malformed calendar entry for year {year}: {e}") from e
        return cls(entries)

    @classmethod
    def from_nepali_datetime(cls, first_year: int | None = None, last_year: int | None = None) -> "CalendarTable":
        """Derive the table from the ``nepali-datetime`` library's published data."""
        import nepali_datetime

        first = nepali_datetime.MINYEAR if first_year is None else first_year
        last = nepali_datetime.MAXYEAR if last_year is None else last_year
        entries = []
        for year in range(first, last + 1):
            months = tuple(_probe_month_length(nepali_datetime, year, m) for m in range(1, 13))
            epoch = nepali_datetime.date(year, 1, 1).to_datetime_date()
            entries.append(YearInfo(year=year, epoch=epoch, months=months))
        return cls(entries)


def _probe_month_length(nepali_datetime, year: int, month: int) -> int:
    for day in range(MAX_MONTH_LENGTH, MIN_MONTH_LENGTH - 1, -1):
        try:
            nepali_datetime.date(year, month, day)
        except ValueError:
            continue
        return day
    raise CalendarTableError(f"nepali-datetime has no valid length for {year}-{month:02d}")


def _validate(ordered: list[YearInfo]) -> None:
    previous = None
    for entry in ordered:
        if len(entry.months) != 12:
            raise CalendarTableError(
                f"Year {entry.year} has {len(entry.months)} month lengths, expected 12"
            )
        for month, length in enumerate(entry.months, start=1):
            if not MIN_MONTH_LENGTH <= length <= MAX_MONTH_LENGTH:
                raise CalendarTableError(
                    f"Month {month} of {entry.year} has implausible length {length}"
                )
        if previous is not None:
            if entry.year != previous.year + 1:
                raise CalendarTableError(
                    f"Calendar table has a gap between {previous.year} and {entry.year}"
                )
            expected = previous.epoch + timedelta(days=previous.days)
            if entry.epoch != expected:
                raise CalendarTableError(
                    f"Epoch of {entry.year} is {entry.epoch}, expected {expected}"
                )
        previous = entry


def load_calendar_table(path: str) -> CalendarTable:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return CalendarTable.from_mapping(data)


@lru_cache(maxsize=None)
def default_table() -> CalendarTable:
    """Process-wide calendar table, loaded once and never mutated."""
    settings = Settings.from_env()
    if settings.calendar_path:
        table = load_calendar_table(settings.calendar_path)
        source = settings.calendar_path
    else:
        table = CalendarTable.from_nepali_datetime()
        source = "nepali-datetime"
    logger.info(
        "Loaded BS calendar table",
        extra={"source": source, "first_year": table.first_year, "last_year": table.last_year},
    )
    return table
