"""
sbm_recurrence.domain.types -- Pure frozen dataclasses for the recurrence core.

ZERO I/O.

Follows the pattern of the kernel DTOs: frozen dataclasses with ``str``
enum fields and tuples for immutable collections.

Invariants enforced:
    - DTOs are immutable.
    - ``Recurrence`` is the only carrier of a rule's selector; a selector on
      a rule that takes none is representable but ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

WEEKDAY_MIN, WEEKDAY_MAX = 1, 7  # Monday=1 .. Sunday=7
DAY_OF_MONTH_MIN, DAY_OF_MONTH_MAX = 1, 28  # every month has these days


# =============================================================================
# Enums
# =============================================================================


class SelectorKind(str, Enum):
    """What a rule's optional selector names."""

    WEEKDAY = "weekday"
    DAY_OF_MONTH = "day_of_month"

    @property
    def bounds(self) -> tuple[int, int]:
        if self is SelectorKind.WEEKDAY:
            return WEEKDAY_MIN, WEEKDAY_MAX
        return DAY_OF_MONTH_MIN, DAY_OF_MONTH_MAX


class RecurrenceRule(str, Enum):
    """How often a customer's job repeats.

    Values are the labels stored on the customer row.
    """

    NONE = "One-time"
    DAILY = "Daily"
    EVERY_OTHER_DAY = "Every Other Day"
    EVERY_3_DAYS = "Every 3 Days"
    WEEKLY = "Weekly"
    BI_WEEKLY = "Every Other Week"
    MONTHLY = "Monthly"
    BI_MONTHLY = "Every Other Month"

    @property
    def short_label(self) -> str:
        return _SHORT_LABELS[self]

    @property
    def selector_kind(self) -> SelectorKind | None:
        """The selector this rule accepts, or None for selector-less rules."""
        if self in (RecurrenceRule.WEEKLY, RecurrenceRule.BI_WEEKLY):
            return SelectorKind.WEEKDAY
        if self in (RecurrenceRule.MONTHLY, RecurrenceRule.BI_MONTHLY):
            return SelectorKind.DAY_OF_MONTH
        return None

    @classmethod
    def from_stored(cls, raw: str | None) -> RecurrenceRule:
        """Parse a stored label; unknown values read as NONE."""
        try:
            return cls(raw)
        except ValueError:
            return cls.NONE


_SHORT_LABELS = {
    RecurrenceRule.NONE: "Once",
    RecurrenceRule.DAILY: "Daily",
    RecurrenceRule.EVERY_OTHER_DAY: "2 Days",
    RecurrenceRule.EVERY_3_DAYS: "3 Days",
    RecurrenceRule.WEEKLY: "Week",
    RecurrenceRule.BI_WEEKLY: "2 Weeks",
    RecurrenceRule.MONTHLY: "Month",
    RecurrenceRule.BI_MONTHLY: "2 Months",
}


class JobStatus(str, Enum):
    """Scheduled job lifecycle status."""

    SCHEDULED = "scheduled"  # Initial; the only state materialization creates
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    RESCHEDULED = "rescheduled"


class JobOrigin(str, Enum):
    """Which path created a job."""

    RECURRENCE = "recurrence"
    MANUAL = "manual"


# =============================================================================
# Contract DTOs
# =============================================================================


@dataclass(frozen=True)
class Recurrence:
    """A repetition cadence with its optional fixed calendar slot.

    ``selector`` is a weekday (1-7, Monday=1) for weekly rules or a
    day-of-month (1-28) for monthly rules.  Without one the cadence is
    counted from the anchor date.
    """

    rule: RecurrenceRule
    selector: int | None = None

    @property
    def effective_selector(self) -> int | None:
        """The selector the evaluator should use.

        None when the rule takes no selector or the stored value is out of
        range; the evaluator then uses the anchor-relative cadence.
        """
        kind = self.rule.selector_kind
        if kind is None or self.selector is None:
            return None
        if isinstance(self.selector, bool) or not isinstance(self.selector, int):
            return None
        low, high = kind.bounds
        if not low <= self.selector <= high:
            return None
        return self.selector

    @property
    def is_recurring(self) -> bool:
        return self.rule is not RecurrenceRule.NONE


ONE_TIME = Recurrence(RecurrenceRule.NONE)


@dataclass(frozen=True)
class ServiceContract:
    """The recurrence-relevant slice of a customer."""

    customer_id: UUID
    anchor_date: date  # Customer creation day; never changes
    recurrence: Recurrence = ONE_TIME


# =============================================================================
# Job DTOs
# =============================================================================


@dataclass(frozen=True)
class ScheduledJob:
    """Immutable snapshot of a scheduled job."""

    job_id: UUID
    customer_id: UUID
    job_date: date
    status: JobStatus = JobStatus.SCHEDULED
    origin: JobOrigin = JobOrigin.RECURRENCE
    scheduled_at: datetime | None = None  # Time-of-day for manual jobs
    completed_at: datetime | None = None  # Set only on transition to COMPLETED
    notes: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class MaterializationResult:
    """Outcome of one materialization pass.

    ``created`` counts committed jobs.  ``suppressed`` counts customers
    skipped because some job already existed that day; ``not_due`` those
    whose rule did not fire; ``duplicates_absorbed`` recurrence inserts that
    lost a race to a concurrent pass.
    """

    target_date: date
    evaluated: int = 0
    created: int = 0
    suppressed: int = 0
    not_due: int = 0
    duplicates_absorbed: int = 0
    job_ids: tuple[UUID, ...] = ()
    correlation_id: str | None = None
