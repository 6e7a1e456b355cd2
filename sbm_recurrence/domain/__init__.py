"""
sbm_recurrence.domain -- Pure types, calendar arithmetic and rule evaluation.

ZERO I/O.  All types are frozen dataclasses.
"""

from sbm_recurrence.domain.recurrence import (
    is_due,
    is_due_for,
    upcoming_due_dates,
    validate_recurrence,
)
from sbm_recurrence.domain.types import (
    JobOrigin,
    JobStatus,
    MaterializationResult,
    Recurrence,
    RecurrenceRule,
    ScheduledJob,
    SelectorKind,
    ServiceContract,
)

__all__ = [
    "JobOrigin",
    "JobStatus",
    "MaterializationResult",
    "Recurrence",
    "RecurrenceRule",
    "ScheduledJob",
    "SelectorKind",
    "ServiceContract",
    "is_due",
    "is_due_for",
    "upcoming_due_dates",
    "validate_recurrence",
]
