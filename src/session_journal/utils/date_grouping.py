"""Group session dates into ISO calendar weeks and months."""

from datetime import date, datetime
from typing import Optional

DATE_FORMAT = "%Y-%m-%d"


def parse_session_date(value: str) -> Optional[date]:
    """Parse a YYYY-MM-DD session date; None when missing or malformed."""
    if not value or len(value) != 10:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def iso_week_key(d: date) -> tuple[int, int]:
    """(ISO year, ISO week). Late-December days can belong to next year's week 1."""
    year, week, _ = d.isocalendar()
    return year, week


def iso_week_start(year: int, week: int) -> date:
    """Monday of the given ISO week."""
    return date.fromisocalendar(year, week, 1)


def week_label(monday: date) -> str:
    """Short label such as "Jan 06"."""
    return monday.strftime("%b %d")


def month_key(value: str) -> str:
    """YYYY-MM prefix of a session date, "" when too short."""
    if len(value) < 7:
        return ""
    return value[:7]
