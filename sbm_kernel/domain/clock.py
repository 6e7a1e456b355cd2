"""
Module: sbm_kernel.domain.clock
Responsibility: Injectable source of "now" and "today" for the recurrence
    evaluator, the materializer and the lifecycle service.  Nothing else in
    the core reads the system clock.

Calendar days:
    A job belongs to a calendar day, and which day it is depends on where the
    device is.  Each clock has a zone; ``today()`` is the date of ``now()`` in
    that zone, so a pass run just after local midnight lands on the new local
    day rather than the UTC one.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone, tzinfo


class Clock(ABC):
    """Time source handed to services through their constructors."""

    @abstractmethod
    def now(self) -> datetime: ...

    def now_utc(self) -> datetime:
        return self.now().astimezone(timezone.utc)

    def today(self) -> date:
        return self.now().date()

    @property
    def tz(self) -> tzinfo | None:
        """Zone whose midnight starts a new calendar day."""
        return self.now().tzinfo


class SystemClock(Clock):
    """Wall-clock time in ``tz`` (UTC when omitted)."""

    def __init__(self, tz: tzinfo | None = None):
        self._tz = tz or timezone.utc

    @property
    def tz(self) -> tzinfo:
        return self._tz

    def now(self) -> datetime:
        return datetime.now(self._tz)


class DeterministicClock(Clock):
    """
    Frozen clock for tests.

    ``now()`` only moves when ``advance``, ``advance_days`` or ``set_time``
    is called.  A naive start time stays naive, which keeps comparisons
    with SQLite-stored timestamps simple.
    """

    def __init__(self, fixed_time: datetime | None = None):
        self._start = fixed_time or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self._offset = timedelta()

    def now(self) -> datetime:
        return self._start + self._offset

    def now_utc(self) -> datetime:
        current = self.now()
        return current if current.tzinfo is None else current.astimezone(timezone.utc)

    def set_time(self, time: datetime) -> None:
        self._start = time
        self._offset = timedelta()

    def advance(self, seconds: int = 1) -> None:
        self._offset += timedelta(seconds=seconds)

    def advance_days(self, days: int = 1) -> None:
        self._offset += timedelta(days=days)
