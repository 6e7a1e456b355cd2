"""
Calendar arithmetic for recurrence evaluation.

ZERO I/O.  Every function here works on calendar days (``datetime.date``);
time-of-day never takes part in recurrence decisions.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Any

from sbm_kernel.exceptions import InvalidTargetDateError


def to_calendar_day(value: Any, tz: tzinfo | None = None) -> date:
    """Normalize ``value`` to a calendar day.

    Accepts a ``date``, a ``datetime`` (aware values are converted to ``tz``
    when one is given, then truncated), or an ISO-8601 string.

    Raises:
        InvalidTargetDateError: For None, unparseable strings, or any other type.
    """
    if isinstance(value, datetime):
        if tz is not None and value.tzinfo is not None:
            value = value.astimezone(tz)
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return to_calendar_day(datetime.fromisoformat(text), tz)
        except ValueError as exc:
            raise InvalidTargetDateError(value, str(exc)) from exc

    raise InvalidTargetDateError(
        value, f"expected date, datetime or ISO string, got {type(value).__name__}"
    )


def days_between(start: date, end: date) -> int:
    """Whole days from ``start`` to ``end`` (negative if end is earlier)."""
    return (end - start).days


def months_between(start: date, end: date) -> int:
    """Whole calendar months completed from ``start`` to ``end``.

    Year/month subtraction, less one when ``end`` has not yet reached
    ``start``'s day of the month.  0 within the same month.  Assumes
    ``end >= start``.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return max(months, 0)


def iso_weekday(day: date) -> int:
    """Weekday index with Monday=1 .. Sunday=7."""
    return day.isoweekday()


def day_of_month(day: date) -> int:
    return day.day
