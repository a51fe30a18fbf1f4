"""Calendar date extraction from OCR text.

Recognizes ISO dates, numeric dates with ``/``, ``-`` or ``.``
separators (US month-first order is tried before European day-first),
and dates with full or abbreviated English month names. Impossible
calendar dates and years outside 1900-2100 are dropped silently.
"""

import datetime
import re
from dataclasses import dataclass
from enum import StrEnum

from src.utils.logger import get_logger

logger = get_logger(__name__)

MIN_YEAR = 1900
MAX_YEAR = 2100


class DateFormat(StrEnum):
    """Textual layout a date was recognized in."""

    ISO = "YYYY-MM-DD"
    US_SLASH = "MM/DD/YYYY"
    EU_SLASH = "DD/MM/YYYY"
    US_DASH = "MM-DD-YYYY"
    EU_DASH = "DD-MM-YYYY"
    US_DOT = "MM.DD.YYYY"
    EU_DOT = "DD.MM.YYYY"
    MONTH_DAY_YEAR = "MONTH DD, YYYY"
    DAY_MONTH_YEAR = "DD MONTH YYYY"


MONTH_NAMES: dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_LONG_MONTHS = (
    "January|February|March|April|May|June|July|August|September|October"
    "|November|December"
)
_SHORT_MONTHS = "Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec"

_ISO_PATTERN = re.compile(r"\b(\d{4})-(\d{1,2})-(\d{1,2})\b")
_NUMERIC_PATTERN = re.compile(r"\b(\d{1,2})([/\-.])(\d{1,2})[/\-.](\d{4})\b")
_MONTH_LONG_PATTERN = re.compile(
    rf"\b({_LONG_MONTHS})\s+(\d{{1,2}}),?\s+(\d{{4}})\b", re.IGNORECASE
)
_MONTH_SHORT_PATTERN = re.compile(
    rf"\b({_SHORT_MONTHS})\.?\s+(\d{{1,2}}),?\s+(\d{{4}})\b", re.IGNORECASE
)
_DAY_MONTH_PATTERN = re.compile(
    rf"\b(\d{{1,2}})\s+({_LONG_MONTHS})\s+(\d{{4}})\b", re.IGNORECASE
)

_NUMERIC_FORMATS: dict[str, tuple[DateFormat, DateFormat]] = {
    "/": (DateFormat.US_SLASH, DateFormat.EU_SLASH),
    "-": (DateFormat.US_DASH, DateFormat.EU_DASH),
    ".": (DateFormat.US_DOT, DateFormat.EU_DOT),
}


@dataclass(frozen=True)
class ExtractedDate:
    """A calendar date found in OCR text."""

    raw: str
    date: datetime.date
    format: DateFormat
    position: int
    line_number: int


def build_date(year: int, month: int, day: int) -> datetime.date | None:
    """Build a calendar date, or ``None`` if it does not exist or is out of range."""
    if not MIN_YEAR <= year <= MAX_YEAR:
        return None
    try:
        return datetime.date(year, month, day)
    except ValueError:
        return None


def _iso(match: re.Match[str]) -> tuple[datetime.date | None, DateFormat]:
    year, month, day = (int(g) for g in match.groups())
    return build_date(year, month, day), DateFormat.ISO


def _numeric(match: re.Match[str]) -> tuple[datetime.date | None, DateFormat]:
    first, separator, second, year = match.groups()
    us_format, eu_format = _NUMERIC_FORMATS[separator]
    parsed = build_date(int(year), int(first), int(second))
    if parsed is not None:
        return parsed, us_format
    return build_date(int(year), int(second), int(first)), eu_format


def _month_day_year(match: re.Match[str]) -> tuple[datetime.date | None, DateFormat]:
    month = MONTH_NAMES[match.group(1).lower()]
    return (
        build_date(int(match.group(3)), month, int(match.group(2))),
        DateFormat.MONTH_DAY_YEAR,
    )


def _day_month_year(match: re.Match[str]) -> tuple[datetime.date | None, DateFormat]:
    month = MONTH_NAMES[match.group(2).lower()]
    return (
        build_date(int(match.group(3)), month, int(match.group(1))),
        DateFormat.DAY_MONTH_YEAR,
    )


# Order matters: the first family to claim a position wins.
_DATE_RULES = [
    (_ISO_PATTERN, _iso),
    (_NUMERIC_PATTERN, _numeric),
    (_MONTH_LONG_PATTERN, _month_day_year),
    (_MONTH_SHORT_PATTERN, _month_day_year),
    (_DAY_MONTH_PATTERN, _day_month_year),
]


def _extract_from_line(
    line: str, line_number: int, line_start: int
) -> list[ExtractedDate]:
    dates: list[ExtractedDate] = []
    claimed: set[int] = set()

    for pattern, interpret in _DATE_RULES:
        for match in pattern.finditer(line):
            position = line_start + match.start()
            if position in claimed:
                continue
            claimed.add(position)
            parsed, date_format = interpret(match)
            if parsed is not None:
                dates.append(
                    ExtractedDate(
                        raw=match.group(0),
                        date=parsed,
                        format=date_format,
                        position=position,
                        line_number=line_number,
                    )
                )

    return dates


def extract_dates(text: str) -> list[ExtractedDate]:
    """Extract all valid calendar dates from OCR text.

    Args:
        text: Full OCR text.

    Returns:
        Extracted dates in discovery order, unique by position.
    """
    dates: list[ExtractedDate] = []
    seen_positions: set[int] = set()
    line_start = 0

    for line_number, line in enumerate(text.split("\n")):
        for extracted in _extract_from_line(line, line_number, line_start):
            if extracted.position not in seen_positions:
                seen_positions.add(extracted.position)
                dates.append(extracted)
        line_start += len(line) + 1

    logger.debug("Extracted %d dates", len(dates))
    return dates
