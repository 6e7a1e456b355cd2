"""
Typed exception hierarchy for the scheduling core.

Every error has a typed class (catch by type, not message), a ``code``
class attribute (machine-readable), and structured attributes carrying
the data that caused it.  The JSON log formatter copies those attributes
into ``exc_*`` fields.

    SBMKernelError (base)
    |
    +-- ScheduleError
    |   +-- InvalidTargetDateError
    |   +-- InvalidRecurrenceSelectorError
    |
    +-- StorageError
    |   +-- StoreReadError
    |   +-- StoreWriteError
    |   +-- MaterializationCommitError
    |
    +-- JobError
    |   +-- JobNotFoundError
    |   +-- InvalidJobTransitionError
    |
    +-- CustomerError
        +-- CustomerNotFoundError

Code            | When raised
----------------|-------------------------------------------------------
INVALID_TARGET_DATE         | Target day cannot be normalized to a date
INVALID_RECURRENCE_SELECTOR | Weekday / day-of-month outside accepted range
STORE_READ_FAILED           | Contract listing or existence check failed
STORE_WRITE_FAILED          | Insert or commit failed (not an idempotent race)
MATERIALIZATION_COMMIT_FAILED | A pass could not commit; nothing was created
JOB_NOT_FOUND               | Job id does not exist
INVALID_JOB_TRANSITION      | Transition out of a non-Scheduled state
CUSTOMER_NOT_FOUND          | Customer id does not exist

Note that a recurrence rule missing its selector is NOT an error: the
evaluator falls back to the anchor-relative cadence.
"""

from typing import Any


class SBMKernelError(Exception):
    """Base exception for all scheduling core errors."""

    code: str = "SBM_KERNEL_ERROR"


# Schedule / input errors


class ScheduleError(SBMKernelError):
    """Base exception for recurrence and scheduling input errors."""

    code: str = "SCHEDULE_ERROR"


class InvalidTargetDateError(ScheduleError):
    """A target date could not be normalized to a calendar day.

    Raised before any customer is evaluated, so no partial work exists.
    """

    code: str = "INVALID_TARGET_DATE"

    def __init__(self, value: Any, reason: str = ""):
        self.value = repr(value)
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Invalid target date {self.value}{detail}")


class InvalidRecurrenceSelectorError(ScheduleError):
    """A selector is outside the range its rule accepts.

    Weekday selectors accept 1-7 (Monday=1); day-of-month selectors accept
    1-28 so that every month contains the selected day.
    """

    code: str = "INVALID_RECURRENCE_SELECTOR"

    def __init__(self, rule: str, selector: Any, minimum: int, maximum: int):
        self.rule = rule
        self.selector = selector
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(
            f"Selector {selector!r} for rule '{rule}' must be an integer "
            f"in [{minimum}, {maximum}]"
        )


# Storage errors


class StorageError(SBMKernelError):
    """Base exception for job/customer store failures."""

    code: str = "STORAGE_ERROR"


class StoreReadError(StorageError):
    """A read against the store failed (listing contracts, existence check)."""

    code: str = "STORE_READ_FAILED"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store read '{operation}' failed: {reason}")


class StoreWriteError(StorageError):
    """An insert or commit failed for a reason other than an idempotent re-insert."""

    code: str = "STORE_WRITE_FAILED"

    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Store write '{operation}' failed: {reason}")


class MaterializationCommitError(StorageError):
    """A materialization pass failed to commit.

    None of the staged jobs were persisted.  The caller may simply invoke
    the pass again later.
    """

    code: str = "MATERIALIZATION_COMMIT_FAILED"

    def __init__(self, target_date: str, staged_jobs: int, reason: str):
        self.target_date = target_date
        self.staged_jobs = staged_jobs
        self.reason = reason
        super().__init__(
            f"Materialization for {target_date} failed to commit "
            f"({staged_jobs} staged job(s) discarded): {reason}"
        )


# Job errors


class JobError(SBMKernelError):
    """Base exception for scheduled job errors."""

    code: str = "JOB_ERROR"


class JobNotFoundError(JobError):
    """Scheduled job with given ID was not found."""

    code: str = "JOB_NOT_FOUND"

    def __init__(self, job_id: str):
        self.job_id = job_id
        super().__init__(f"Scheduled job not found: {job_id}")


class InvalidJobTransitionError(JobError):
    """A status transition was requested that the job lifecycle forbids.

    Only ``scheduled`` jobs can move, and only to ``completed``,
    ``cancelled`` or ``rescheduled``.  Terminal states never move back.
    """

    code: str = "INVALID_JOB_TRANSITION"

    def __init__(self, job_id: str, from_status: str, to_status: str):
        self.job_id = job_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Job {job_id} cannot transition from {from_status} to {to_status}"
        )


# Customer errors


class CustomerError(SBMKernelError):
    """Base exception for customer/contract errors."""

    code: str = "CUSTOMER_ERROR"


class CustomerNotFoundError(CustomerError):
    """Customer with given ID was not found."""

    code: str = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: str):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")
