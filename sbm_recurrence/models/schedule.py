"""
ORM models for customers and their scheduled jobs.

Contract:
    CustomerModel persists the service contract (anchor date, rule,
    selector) alongside contact details.  ScheduledJobModel persists jobs.
    Each has a DTO conversion.

Architecture: sbm_recurrence/models. Imports from sbm_kernel.db.base only.

Invariants enforced:
    - At most one recurrence-origin job per (customer, day): partial UNIQUE
      index ``uq_scheduled_jobs_recurrence_day``.  Manual jobs are not
      constrained.
    - Jobs are deleted only by cascade from their customer.
    - ``anchor_date`` is written once at creation.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sbm_kernel.db.base import TrackedBase, UUIDString

if TYPE_CHECKING:
    from sbm_recurrence.domain.types import ScheduledJob, ServiceContract

_RECURRENCE_ONLY = text("origin = 'recurrence'")


class CustomerModel(TrackedBase):
    """A customer with their service info and recurrence contract."""

    __tablename__ = "customers"

    __table_args__ = (
        Index("ix_customers_recurrence_rule", "recurrence_rule"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    service_name: Mapped[str] = mapped_column(String(200), default="", nullable=False)
    service_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0"), nullable=False,
    )
    recurrence_rule: Mapped[str] = mapped_column(String(50), nullable=False)
    recurrence_selector: Mapped[int | None] = mapped_column(Integer, nullable=True)
    anchor_date: Mapped[date] = mapped_column(Date, nullable=False)

    jobs: Mapped[list["ScheduledJobModel"]] = relationship(
        "ScheduledJobModel",
        back_populates="customer",
        cascade="all, delete-orphan",
    )

    @property
    def initials(self) -> str:
        parts = self.name.split()
        if len(parts) >= 2:
            return (parts[0][:1] + parts[1][:1]).upper()
        return self.name[:2].upper()

    def to_contract(self) -> ServiceContract:
        from sbm_recurrence.domain.types import (
            Recurrence,
            RecurrenceRule,
            ServiceContract,
        )

        return ServiceContract(
            customer_id=self.id,
            anchor_date=self.anchor_date,
            recurrence=Recurrence(
                rule=RecurrenceRule.from_stored(self.recurrence_rule),
                selector=self.recurrence_selector,
            ),
        )


class ScheduledJobModel(TrackedBase):
    """A job scheduled for a specific calendar day."""

    __tablename__ = "scheduled_jobs"

    __table_args__ = (
        Index("ix_scheduled_jobs_customer_day", "customer_id", "job_date"),
        Index("ix_scheduled_jobs_day_status", "job_date", "status"),
        Index(
            "uq_scheduled_jobs_recurrence_day",
            "customer_id",
            "job_date",
            unique=True,
            sqlite_where=_RECURRENCE_ONLY,
            postgresql_where=_RECURRENCE_ONLY,
        ),
    )

    customer_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("customers.id", ondelete="CASCADE"),
        nullable=False,
    )
    job_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    origin: Mapped[str] = mapped_column(String(50), nullable=False)
    scheduled_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    customer: Mapped["CustomerModel"] = relationship(
        "CustomerModel",
        back_populates="jobs",
        foreign_keys=[customer_id],
    )

    def to_dto(self) -> ScheduledJob:
        from sbm_recurrence.domain.types import JobOrigin, JobStatus, ScheduledJob

        return ScheduledJob(
            job_id=self.id,
            customer_id=self.customer_id,
            job_date=self.job_date,
            status=JobStatus(self.status),
            origin=JobOrigin(self.origin),
            scheduled_at=self.scheduled_at,
            completed_at=self.completed_at,
            notes=self.notes,
            created_at=self.created_at,
        )

    @classmethod
    def from_dto(cls, dto: ScheduledJob, created_by_id: UUID) -> ScheduledJobModel:
        model = cls(
            id=dto.job_id,
            customer_id=dto.customer_id,
            job_date=dto.job_date,
            status=dto.status.value,
            origin=dto.origin.value,
            scheduled_at=dto.scheduled_at,
            completed_at=dto.completed_at,
            notes=dto.notes,
            created_by_id=created_by_id,
            updated_by_id=None,
        )
        if dto.created_at is not None:
            model.created_at = dto.created_at
        return model
