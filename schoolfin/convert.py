from datetime import date, datetime, timedelta
from typing import Optional

from schoolfin.calendar_table import CalendarTable, default_table
from schoolfin.domain import BSDate

__all__ = [
    "BS_MONTHS_EN",
    "BS_MONTHS_NE",
    "to_bs",
    "to_ad",
    "month_length",
    "month_name",
    "parse_bs",
    "format_bs",
]

BS_MONTHS_EN = (
    "Baisakh", "Jestha", "Ashadh", "Shrawan", "Bhadra", "Ashwin",
    "Kartik", "Mangsir", "Poush", "Magh", "Falgun", "Chaitra",
)

BS_MONTHS_NE = (
    "बैशाख", "जेठ", "आषाढ", "श्रावण", "भाद्र", "आश्विन",
    "कार्तिक", "मंसिर", "पौष", "माघ", "फाल्गुन", "चैत्र",
)


def to_bs(ad_date: date, table: Optional[CalendarTable] = None) -> BSDate:
    """Convert an AD calendar date to the BS date of the same solar day.

    Raises UnsupportedEraError outside the table range.
    """
    table = table or default_table()
    if isinstance(ad_date, datetime):
        ad_date = ad_date.date()
    ordinal = ad_date.toordinal()
    info = table.year_for_ordinal(ordinal)

    offset = ordinal - info.epoch.toordinal()
    month = 1
    for length in info.months:
        if offset < length:
            break
        offset -= length
        month += 1
    return BSDate(info.year, month, offset + 1)


def to_ad(bs_date: BSDate, table: Optional[CalendarTable] = None) -> date:
    """Convert a BS date to its AD calendar date.

    Raises InvalidBSDateError when the day exceeds the month length and
    UnsupportedEraError when the year is not in the table.
    """
    table = table or default_table()
    table.validate(bs_date.year, bs_date.month, bs_date.day)
    info = table.year_info(bs_date.year)
    offset = sum(info.months[: bs_date.month - 1]) + bs_date.day - 1
    return info.epoch + timedelta(days=offset)


def month_length(year: int, month: int, table: Optional[CalendarTable] = None) -> int:
    return (table or default_table()).month_length(year, month)


def month_name(month: int, locale: str = "en") -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"BS month must be in 1..12, got {month}")
    names = BS_MONTHS_NE if locale == "ne" else BS_MONTHS_EN
    return names[month - 1]


def parse_bs(value: str, table: Optional[CalendarTable] = None) -> BSDate:
    """Parse ``YYYY-MM-DD`` into a BSDate validated against the table."""
    try:
        year, month, day = (int(part) for part in value.strip().split("-"))
    except (AttributeError, ValueError):
        raise ValueError(f"BS date must look like YYYY-MM-DD, got {value!r}") from None
    bs = BSDate(year, month, day)
    (table or default_table()).validate(year, month, day)
    return bs


def format_bs(bs_date: BSDate, locale: str = "en") -> str:
    # "Baisakh 5, 2081", the form used on printed reports
    return f"{month_name(bs_date.month, locale)} {bs_date.day}, {bs_date.year}"
