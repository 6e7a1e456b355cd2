"""
Store adapters consumed by the materializer.

Contract:
    ``ContractSource`` lists recurring service contracts (read-only).
    ``JobStore`` answers "does any job exist for (customer, day)", inserts
    recurrence jobs, and owns the transaction boundary (commit/rollback).

Architecture: sbm_recurrence/services.  The SQL implementations are the
    only place the materializer's data access touches SQLAlchemy.

Invariants enforced:
    - The existence check counts jobs of ANY status and ANY origin.
    - Each insert runs in its own SAVEPOINT.  A unique violation caused by
      an existing recurrence job for the same (customer, day) is absorbed
      as "already materialized"; anything else surfaces as StoreWriteError.
    - Database errors never leak untyped: reads raise StoreReadError,
      writes and commits raise StoreWriteError.
"""

from __future__ import annotations

from datetime import date
from typing import Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from sbm_kernel.exceptions import StoreReadError, StoreWriteError
from sbm_kernel.logging_config import get_logger

from sbm_recurrence.domain.types import (
    JobOrigin,
    RecurrenceRule,
    ScheduledJob,
    ServiceContract,
)
from sbm_recurrence.models.schedule import CustomerModel, ScheduledJobModel

logger = get_logger("recurrence.stores")


# =============================================================================
# Protocols
# =============================================================================


@runtime_checkable
class ContractSource(Protocol):
    """Read-only listing of service contracts."""

    def list_recurring_contracts(self) -> tuple[ServiceContract, ...]:
        """Every contract whose rule is not NONE."""
        ...


@runtime_checkable
class JobStore(Protocol):
    """Existence check, insert, and transaction boundary for jobs."""

    def has_job_on(self, customer_id: UUID, day: date) -> bool:
        ...

    def add_scheduled(self, job: ScheduledJob, actor_id: UUID) -> bool:
        """Stage ``job``.  False means an equal recurrence job already exists."""
        ...

    def commit(self) -> None:
        ...

    def rollback(self) -> None:
        ...


# =============================================================================
# SQLAlchemy implementations
# =============================================================================


class SqlContractSource:
    """ContractSource backed by the ``customers`` table."""

    def __init__(self, session: Session):
        self._session = session

    def list_recurring_contracts(self) -> tuple[ServiceContract, ...]:
        try:
            customers = self._session.execute(
                select(CustomerModel)
                .where(CustomerModel.recurrence_rule != RecurrenceRule.NONE.value)
                .order_by(CustomerModel.anchor_date, CustomerModel.id)
            ).scalars().all()
        except SQLAlchemyError as exc:
            raise StoreReadError("list_recurring_contracts", str(exc)) from exc

        contracts = tuple(c.to_contract() for c in customers)
        # Unknown stored labels read as NONE
        return tuple(c for c in contracts if c.recurrence.is_recurring)


class SqlJobStore:
    """JobStore backed by the ``scheduled_jobs`` table.

    Does NOT open or close sessions; the caller owns the session lifecycle.
    ``commit()`` and ``rollback()`` act on the given session.
    """

    def __init__(self, session: Session):
        self._session = session

    def has_job_on(self, customer_id: UUID, day: date) -> bool:
        try:
            return bool(
                self._session.execute(
                    select(
                        exists().where(
                            ScheduledJobModel.customer_id == customer_id,
                            ScheduledJobModel.job_date == day,
                        )
                    )
                ).scalar()
            )
        except SQLAlchemyError as exc:
            raise StoreReadError("has_job_on", str(exc)) from exc

    def add_scheduled(self, job: ScheduledJob, actor_id: UUID) -> bool:
        model = ScheduledJobModel.from_dto(job, created_by_id=actor_id)

        savepoint = self._session.begin_nested()
        try:
            self._session.add(model)
            self._session.flush()
        except IntegrityError as exc:
            savepoint.rollback()
            if job.origin is JobOrigin.RECURRENCE and self._has_recurrence_job(
                job.customer_id, job.job_date,
            ):
                logger.info(
                    "recurrence_insert_absorbed",
                    extra={
                        "customer_id": str(job.customer_id),
                        "job_date": job.job_date.isoformat(),
                    },
                )
                return False
            raise StoreWriteError("add_scheduled", str(exc)) from exc
        except SQLAlchemyError as exc:
            # Includes "database is locked" from a writer in another process.
            savepoint.rollback()
            raise StoreWriteError("add_scheduled", str(exc)) from exc

        savepoint.commit()
        return True

    def commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as exc:
            raise StoreWriteError("commit", str(exc)) from exc

    def rollback(self) -> None:
        self._session.rollback()

    def _has_recurrence_job(self, customer_id: UUID, day: date) -> bool:
        return bool(
            self._session.execute(
                select(
                    exists().where(
                        ScheduledJobModel.customer_id == customer_id,
                        ScheduledJobModel.job_date == day,
                        ScheduledJobModel.origin == JobOrigin.RECURRENCE.value,
                    )
                )
            ).scalar()
        )
