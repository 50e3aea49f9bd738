"""Typed errors for calendar conversion and reporting.

Every error carries a machine-readable ``code`` plus the structured values
that caused it, so callers branch on type and never on message text.
"""

__all__ = [
    "SchoolFinError",
    "CalendarError",
    "UnsupportedEraError",
    "InvalidBSDateError",
    "CalendarTableError",
    "CategoryCatalogError",
    "DataQualityWarning",
]


class SchoolFinError(Exception):
    code: str = "schoolfin_error"

    def to_dict(self) -> dict:
        return {"error": self.code, "message": str(self)}


class CalendarError(SchoolFinError):
    code = "calendar_error"


class UnsupportedEraError(CalendarError):
    """A date lies outside the years covered by the calendar table."""

    code = "unsupported_era"

    def __init__(self, value, first_year: int, last_year: int, calendar: str = "BS"):
        self.value = value
        self.first_year = first_year
        self.last_year = last_year
        self.calendar = calendar
        super().__init__(
            f"{calendar} date {value} is outside the supported range "
            f"{first_year}..{last_year} BS"
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "value": str(self.value),
            "first_year": self.first_year,
            "last_year": self.last_year,
        }


class InvalidBSDateError(CalendarError):
    code = "invalid_bs_date"

    def __init__(self, year: int, month: int, day: int, reason: str):
        self.year = year
        self.month = month
        self.day = day
        self.reason = reason
        super().__init__(f"Invalid BS date {year}-{month:02d}-{day:02d}: {reason}")

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "year": self.year,
            "month": self.month,
            "day": self.day,
        }


class CalendarTableError(CalendarError):
    code = "calendar_table"


class CategoryCatalogError(SchoolFinError):
    code = "category_catalog"


class DataQualityWarning(UserWarning):
    """A ledger record that could not be bucketed and was left out of a report."""

    code = "data_quality"

    def __init__(self, record_id, reason: str):
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Skipped record {record_id}: {reason}")

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, DataQualityWarning)
            and self.record_id == other.record_id
            and self.reason == other.reason
        )

    def __hash__(self) -> int:
        return hash((self.record_id, self.reason))

    def to_dict(self) -> dict:
        return {"error": self.code, "record_id": str(self.record_id), "reason": self.reason}
