"""
Pytest fixtures for the scheduling core test suite.

Provides:
- Structured logging setup and a ``captured_logs`` fixture
- In-memory SQLite engine/sessions with the real ORM models
- Deterministic clock and actor id
- Small builders for customers and jobs

SQLite stores datetimes without tzinfo, so the default clock uses naive
times; calendar-day logic never depends on the zone in these tests.
"""

import json
import logging
from datetime import date, datetime
from io import StringIO
from uuid import UUID

import pytest
from sqlalchemy.orm import sessionmaker

from sbm_kernel.db.base import Base
from sbm_kernel.db.engine import build_engine
from sbm_kernel.domain.clock import DeterministicClock
from sbm_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

import sbm_recurrence.models  # noqa: F401  (registers tables)

from tests.builders import TEST_ACTOR_ID, add_customer, add_job

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture sbm_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, materializer):
            materializer.materialize(date(2024, 1, 3))
            logs = captured_logs()
            assert any(r["message"] == "job_materialized" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("sbm_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    eng = build_engine("sqlite:///:memory:")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def file_engine(tmp_path):
    """File-backed SQLite engine; connections from different threads share data."""
    eng = build_engine(f"sqlite:///{tmp_path / 'sbm_test.db'}")
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return DeterministicClock(fixed_time=datetime(2024, 1, 3, 9, 0, 0))


@pytest.fixture
def actor_id() -> UUID:
    return TEST_ACTOR_ID


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def make_customer(db_session):
    def _make(**kwargs):
        return add_customer(db_session, **kwargs)

    return _make


@pytest.fixture
def make_job(db_session):
    def _make(customer_id: UUID, job_date: date, **kwargs):
        return add_job(db_session, customer_id, job_date, **kwargs)

    return _make
