"""
Local wall-clock calendar helpers.

Dates are plain `datetime.date` values (no timezone, no UTC round trip), so a
"2024-06-10" string always means June 10th for every caller. Times of day are
handled as minutes since midnight.
"""
import re
from datetime import date, timedelta
from typing import Iterator, Optional

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")

# Index 0 is Sunday, matching the court open-flag keys
WEEKDAY_KEYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")
WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

MINUTES_PER_DAY = 24 * 60


def parse_local_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a 'YYYY-MM-DD' string into a local date.

    Returns None for anything malformed, including impossible calendar dates
    like 2024-02-30. Callers must check for None before use.
    """
    if not value or not _DATE_RE.match(value):
        return None
    year, month, day = (int(part) for part in value.split("-"))
    try:
        return date(year, month, day)
    except ValueError:
        return None


def format_date(d: date) -> str:
    return d.strftime("%Y-%m-%d")


def weekday_index(d: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def weekday_key(d: date) -> str:
    return WEEKDAY_KEYS[weekday_index(d)]


def weekday_name(d: date) -> str:
    return WEEKDAY_NAMES[weekday_index(d)]


def is_weekend(d: date) -> bool:
    return weekday_index(d) in (0, 6)


def add_years(d: date, years: int) -> date:
    """Same month/day `years` later; Feb 29 falls back to Feb 28."""
    try:
        return d.replace(year=d.year + years)
    except ValueError:
        return d.replace(year=d.year + years, day=28)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every date from start to end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def parse_hhmm(value: str) -> int:
    """
    Convert 'HH:MM' to minutes since midnight.

    Raises ValueError on malformed input.
    """
    match = _TIME_RE.match(value.strip()) if value else None
    if not match:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    """Minutes since midnight to zero-padded 'HH:MM' (wraps past midnight)."""
    minutes %= MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def is_valid_hhmm(value: str) -> bool:
    try:
        parse_hhmm(value)
    except ValueError:
        return False
    return True
