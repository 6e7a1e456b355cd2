"""
JobLifecycleService -- manual scheduling and status transitions.

Contract:
    ``schedule_manual()`` creates a manual job (never deduplicated; it
    does block materialization for that day).  ``complete_job()``,
    ``cancel_job()`` and ``reschedule_job()`` move a Scheduled job to its
    terminal state.  ``get_job()`` / ``jobs_for_day()`` for queries.

Invariants enforced:
    - Allowed transitions: scheduled -> completed | cancelled | rescheduled.
      Nothing leaves a terminal state.
    - ``completed_at`` is set only on transition to completed, from the
      injected Clock.
    - Jobs are never deleted here.

Non-goals:
    - Does NOT call ``session.commit()`` -- caller controls boundaries.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

from sqlalchemy import select
from sqlalchemy.orm import Session

from sbm_kernel.domain.clock import Clock, SystemClock
from sbm_kernel.exceptions import (
    CustomerNotFoundError,
    InvalidJobTransitionError,
    JobNotFoundError,
)
from sbm_kernel.logging_config import get_logger

from sbm_recurrence.domain.calendar import to_calendar_day
from sbm_recurrence.domain.types import JobOrigin, JobStatus, ScheduledJob
from sbm_recurrence.models.schedule import CustomerModel, ScheduledJobModel

logger = get_logger("recurrence.lifecycle")

_ALLOWED_TRANSITIONS: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.SCHEDULED: frozenset(
        {JobStatus.COMPLETED, JobStatus.CANCELLED, JobStatus.RESCHEDULED}
    ),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
    JobStatus.RESCHEDULED: frozenset(),
}


class JobLifecycleService:
    """Manual job creation and the external status transitions."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
    ):
        self._session = session
        self._clock = clock or SystemClock()
        self._actor_id = actor_id or uuid4()

    # -------------------------------------------------------------------------
    # Manual scheduling
    # -------------------------------------------------------------------------

    def schedule_manual(
        self,
        customer_id: UUID,
        when: date | datetime | str,
        notes: str | None = None,
    ) -> ScheduledJob:
        """Schedule a one-off job for a customer.

        ``when`` may carry a time of day; the job's day is its calendar date.

        Raises:
            CustomerNotFoundError: If ``customer_id`` does not exist.
            InvalidTargetDateError: If ``when`` is not a date.
        """
        day = to_calendar_day(when, self._clock.tz)
        if self._session.get(CustomerModel, customer_id) is None:
            raise CustomerNotFoundError(str(customer_id))

        dto = ScheduledJob(
            job_id=uuid4(),
            customer_id=customer_id,
            job_date=day,
            status=JobStatus.SCHEDULED,
            origin=JobOrigin.MANUAL,
            scheduled_at=when if isinstance(when, datetime) else None,
            notes=notes or None,
            created_at=self._clock.now(),
        )
        self._session.add(ScheduledJobModel.from_dto(dto, created_by_id=self._actor_id))
        self._session.flush()

        logger.info(
            "job_scheduled_manually",
            extra={
                "job_id": str(dto.job_id),
                "customer_id": str(customer_id),
                "job_date": day.isoformat(),
            },
        )
        return dto

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def complete_job(self, job_id: UUID) -> ScheduledJob:
        return self._transition(job_id, JobStatus.COMPLETED)

    def cancel_job(self, job_id: UUID) -> ScheduledJob:
        return self._transition(job_id, JobStatus.CANCELLED)

    def reschedule_job(self, job_id: UUID) -> ScheduledJob:
        return self._transition(job_id, JobStatus.RESCHEDULED)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_job(self, job_id: UUID) -> ScheduledJob:
        """Raises JobNotFoundError if ``job_id`` does not exist."""
        return self._load(job_id).to_dto()

    def jobs_for_day(
        self, day: date, status: JobStatus | None = None,
    ) -> tuple[ScheduledJob, ...]:
        query = select(ScheduledJobModel).where(ScheduledJobModel.job_date == day)
        if status is not None:
            query = query.where(ScheduledJobModel.status == status.value)
        models = self._session.execute(
            query.order_by(ScheduledJobModel.created_at, ScheduledJobModel.id)
        ).scalars().all()
        return tuple(m.to_dto() for m in models)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _transition(self, job_id: UUID, target: JobStatus) -> ScheduledJob:
        model = self._load(job_id)
        current = JobStatus(model.status)

        if target not in _ALLOWED_TRANSITIONS[current]:
            raise InvalidJobTransitionError(
                str(job_id), current.value, target.value,
            )

        model.status = target.value
        if target is JobStatus.COMPLETED:
            model.completed_at = self._clock.now()
        model.updated_by_id = self._actor_id
        self._session.flush()

        logger.info(
            "job_status_changed",
            extra={
                "job_id": str(job_id),
                "from_status": current.value,
                "to_status": target.value,
            },
        )
        return model.to_dto()

    def _load(self, job_id: UUID) -> ScheduledJobModel:
        model = self._session.get(ScheduledJobModel, job_id)
        if model is None:
            raise JobNotFoundError(str(job_id))
        return model
