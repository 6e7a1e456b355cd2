"""
JobMaterializer -- idempotent catch-up pass that creates recurring jobs.

Contract:
    ``materialize(target_date)`` loads every recurring contract, skips
    customers that already have ANY job on the target day, asks the pure
    evaluator whether the rule is due, stages one Scheduled job per due
    customer, and commits all of them as one unit of work.

Architecture: sbm_recurrence/services.  Uses sbm_recurrence.domain for
    pure evaluation and the store protocols for all I/O.

Invariants enforced:
    - At most one recurrence job per (customer, day): existence check
      before insert, a process-wide single-writer lock around the whole
      pass, and the store's unique index as the last line.
    - Suppression by any job: an existing job of any status or origin on
      the target day blocks generation for that customer.
    - All-or-nothing: a failed commit rolls back every staged job.
    - Invalid targets are rejected before any contract is read.
    - Existing jobs are never updated or deleted.
    - Time comes from the injected Clock.

Non-goals:
    - Does NOT retry; the caller re-invokes on its next opportunity.
    - Does NOT schedule itself.
"""

from __future__ import annotations

import threading
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from sbm_kernel.domain.clock import Clock, SystemClock
from sbm_kernel.exceptions import (
    MaterializationCommitError,
    StorageError,
    StoreWriteError,
)
from sbm_kernel.logging_config import LogContext, get_logger

from sbm_recurrence.domain.calendar import to_calendar_day
from sbm_recurrence.domain.recurrence import is_due_for
from sbm_recurrence.domain.types import (
    JobOrigin,
    JobStatus,
    MaterializationResult,
    ScheduledJob,
)
from sbm_recurrence.services.stores import ContractSource, JobStore

logger = get_logger("recurrence.materializer")

# Serializes passes within the process.
_WRITER_LOCK = threading.Lock()


class JobMaterializer:
    """Stateless materialization service.

    Construct one per session with explicit dependencies; nothing is kept
    between calls except the shared writer lock.
    """

    def __init__(
        self,
        contracts: ContractSource,
        jobs: JobStore,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
        writer_lock: threading.Lock | None = None,
    ):
        self._contracts = contracts
        self._jobs = jobs
        self._clock = clock or SystemClock()
        self._actor_id = actor_id or uuid4()
        self._writer_lock = writer_lock or _WRITER_LOCK

    def materialize(self, target_date: Any = None) -> MaterializationResult:
        """Run one pass for ``target_date`` (default: the clock's today).

        Returns:
            MaterializationResult; ``created`` is the number of new jobs.

        Raises:
            InvalidTargetDateError: ``target_date`` is not a calendar day.
            StoreReadError: Contracts or existing jobs could not be read.
            StoreWriteError: An insert failed for a non-idempotent reason.
            MaterializationCommitError: The commit failed; nothing was created.
        """
        if target_date is None:
            day = self._clock.today()
        else:
            day = to_calendar_day(target_date, self._clock.tz)

        correlation_id = str(uuid4())

        with self._writer_lock, LogContext.bind(
            correlation_id=correlation_id,
            actor_id=str(self._actor_id),
            target_date=day.isoformat(),
        ):
            try:
                result = self._run_pass(day, correlation_id)
            except StorageError:
                self._jobs.rollback()
                raise

            try:
                self._jobs.commit()
            except StoreWriteError as exc:
                self._jobs.rollback()
                logger.error(
                    "materialization_commit_failed",
                    extra={"staged_jobs": result.created},
                    exc_info=True,
                )
                raise MaterializationCommitError(
                    day.isoformat(), result.created, exc.reason,
                ) from exc

            logger.info(
                "materialization_completed",
                extra={
                    "evaluated": result.evaluated,
                    "jobs_created": result.created,
                    "suppressed": result.suppressed,
                    "not_due": result.not_due,
                    "duplicates_absorbed": result.duplicates_absorbed,
                },
            )
            return result

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_pass(self, day: date, correlation_id: str) -> MaterializationResult:
        contracts = self._contracts.list_recurring_contracts()
        now = self._clock.now()

        logger.info(
            "materialization_started",
            extra={"contracts": len(contracts)},
        )

        evaluated = 0
        suppressed = 0
        not_due = 0
        absorbed = 0
        staged: list[UUID] = []

        for contract in contracts:
            if not contract.recurrence.is_recurring:
                continue
            evaluated += 1

            if self._jobs.has_job_on(contract.customer_id, day):
                suppressed += 1
                logger.debug(
                    "materialization_suppressed",
                    extra={"customer_id": str(contract.customer_id)},
                )
                continue

            if not is_due_for(contract, day):
                not_due += 1
                continue

            job = ScheduledJob(
                job_id=uuid4(),
                customer_id=contract.customer_id,
                job_date=day,
                status=JobStatus.SCHEDULED,
                origin=JobOrigin.RECURRENCE,
                created_at=now,
            )

            if not self._jobs.add_scheduled(job, self._actor_id):
                absorbed += 1
                continue

            staged.append(job.job_id)
            logger.info(
                "job_materialized",
                extra={
                    "customer_id": str(contract.customer_id),
                    "job_id": str(job.job_id),
                    "rule": contract.recurrence.rule.value,
                },
            )

        return MaterializationResult(
            target_date=day,
            evaluated=evaluated,
            created=len(staged),
            suppressed=suppressed,
            not_due=not_due,
            duplicates_absorbed=absorbed,
            job_ids=tuple(staged),
            correlation_id=correlation_id,
        )
