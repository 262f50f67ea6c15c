"""Calendar-date string helpers.

Every date in the cycle log is a zero-padded ``YYYY-MM-DD`` string.  Because
the format sorts in calendar order, plain string comparison is used for range
checks throughout the package; these helpers are only needed when arithmetic
or display formatting is involved.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import Literal

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

DateStyle = Literal["long", "short"]


def to_date_string(value: date | datetime) -> str:
    """Return the canonical ``YYYY-MM-DD`` string for a calendar day.

    Datetimes are reduced to their local calendar day; aware datetimes are
    converted to local time first.
    """
    if isinstance(value, datetime):
        value = value.astimezone().date() if value.tzinfo else value.date()
    return value.isoformat()


def is_date_string(value: object) -> bool:
    """True if ``value`` is a zero-padded, valid ``YYYY-MM-DD`` string."""
    if not isinstance(value, str) or not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string.

    Raises:
        ValueError: If ``value`` is not a zero-padded calendar date.
    """
    if not isinstance(value, str) or not _DATE_RE.match(value):
        raise ValueError(f"Expected a YYYY-MM-DD date string, got {value!r}")
    return date.fromisoformat(value)


def add_days(value: str, days: int) -> str:
    """Shift a date string by ``days`` calendar days (negative goes back)."""
    return to_date_string(parse_date(value) + timedelta(days=days))


def days_between(start: str, end: str) -> int:
    """Whole calendar days from ``start`` to ``end`` (negative if end is earlier)."""
    return (parse_date(end) - parse_date(start)).days


def format_date(value: str, style: DateStyle = "long") -> str:
    """Render a date string for display.

    ``long`` gives ``"March 1, 2024"``; ``short`` gives ``"3/1"``.
    """
    d = parse_date(value)
    if style == "short":
        return f"{d.month}/{d.day}"
    return f"{calendar.month_name[d.month]} {d.day}, {d.year}"
