"""
Module: sbm_kernel.db.engine
Responsibility: Build the SQLAlchemy engine, hold the process-wide engine and
    session factory, and provide a commit-or-rollback session scope.
Architecture position: Kernel > DB.  May import from db/base.py.
    ``create_tables`` imports the ORM models so metadata is complete.

Backends:
    - SQLite (the on-device store): foreign keys are switched on per
      connection so customer deletion cascades to jobs, and the pysqlite
      driver's implicit transaction handling is replaced with explicit
      BEGIN so SAVEPOINTs behave.
    - Anything else (e.g. PostgreSQL): pooled engine with pre-ping.

Failure modes:
    - RuntimeError from any accessor used before init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from sbm_kernel.logging_config import get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Database not initialized; call init_engine_from_url() first."


def configure_sqlite_engine(engine: Engine) -> Engine:
    """Install connection hooks that make SQLite transactional semantics usable.

    Enables ``PRAGMA foreign_keys`` and takes transaction control away from
    pysqlite so ``Session.begin_nested()`` issues real SAVEPOINTs inside an
    explicit BEGIN.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(
    database_url: str,
    echo: bool = False,
    pool_size: int = 5,
    max_overflow: int = 5,
    pool_timeout: int = 30,
) -> Engine:
    """Create (but do not register) an engine for ``database_url``.

    Pool settings apply to non-SQLite backends only.
    """
    if database_url.startswith("sqlite"):
        return configure_sqlite_engine(create_engine(database_url, echo=echo))

    return create_engine(
        database_url,
        echo=echo,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
    )


def init_engine_from_url(database_url: str, echo: bool = False, **pool_options) -> Engine:
    """Build the process-wide engine and session factory.

    Calling it again disposes the previous engine first.  ``pool_options``
    are passed to ``build_engine`` (pool_size, max_overflow, pool_timeout).
    """
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()

    _engine = build_engine(database_url, echo=echo, **pool_options)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


def get_session() -> Session:
    """A new Session from the process-wide factory."""
    return get_session_factory()()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session that commits on clean exit and rolls back on error.

    The session is always closed; the error is re-raised.
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("session_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create every table known to the ORM models (existing tables are kept)."""
    from sbm_kernel.db.base import Base

    import sbm_recurrence.models  # noqa: F401  (registers tables)

    Base.metadata.create_all(get_engine())


def drop_tables() -> None:
    """Drop every table. Testing only."""
    from sbm_kernel.db.base import Base

    import sbm_recurrence.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose and forget the process-wide engine."""
    global _engine, _session_factory

    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None


atexit.register(reset_engine)
