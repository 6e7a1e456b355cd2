"""
Module: sbm_kernel.db.base
Responsibility: Declarative base classes for the scheduling core's ORM
    models: UUID keys, the column type map, and audit columns.
Architecture position: Kernel > DB.  Lowest-level import target; every model
    file imports from here.  MUST NOT import from sbm_recurrence or sbm_config.

Invariants enforced:
    - Every row has a uuid4 primary key stored as String(36), identical on
      SQLite and PostgreSQL.
    - Calendar days map to Date, never DateTime: a job's day carries no
      time-of-day and compares by value.
    - Every row records who created it.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID as PyUUID, uuid4

from sqlalchemy import Date, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """``uuid.UUID`` in Python, 36-character text in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else PyUUID(value)


class Base(DeclarativeBase):
    """Declarative base: uuid4 ``id`` and the shared annotation-to-column map.

    Service prices are Numeric(12, 2); datetimes are timezone-aware columns.
    """

    type_annotation_map: ClassVar[dict] = {
        PyUUID: UUIDString(),
        Decimal: Numeric(12, 2),
        date: Date,
        datetime: DateTime(timezone=True),
    }

    id: Mapped[PyUUID] = mapped_column(UUIDString(), primary_key=True, default=uuid4)


class TrackedBase(Base):
    """Abstract base adding creation/update timestamps and actor ids.

    ``created_at`` falls back to the database clock; services set it from
    their injected Clock.  ``created_by_id`` is mandatory.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    created_by_id: Mapped[PyUUID] = mapped_column(UUIDString(), nullable=False)
    updated_by_id: Mapped[PyUUID | None] = mapped_column(UUIDString(), nullable=True)


UUID = PyUUID
