"""
RecurrenceOrchestrator -- DI container for the scheduling core.

Contract:
    Wires the store adapters, JobMaterializer, CustomerService,
    JobLifecycleService and ForegroundHook with one Clock and one actor id.
    ``bootstrap()`` is the app shell's one-call setup from settings.

Architecture: sbm_recurrence (top-level).  The canonical entry point for
    configuring and running materialization.

Invariants enforced:
    - Every service receives the same Clock.
    - Services are constructed per session; no process-wide service
      singletons.
"""

from __future__ import annotations

from typing import Callable
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from sbm_config.loader import parse_timezone
from sbm_config.schema import SchedulerSettings
from sbm_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from sbm_kernel.domain.clock import Clock, SystemClock
from sbm_kernel.logging_config import configure_logging, get_logger

from sbm_recurrence.services.customers import CustomerService
from sbm_recurrence.services.hook import ForegroundHook
from sbm_recurrence.services.lifecycle import JobLifecycleService
from sbm_recurrence.services.materializer import JobMaterializer
from sbm_recurrence.services.stores import SqlContractSource, SqlJobStore

logger = get_logger("recurrence.orchestrator")


class RecurrenceOrchestrator:
    """DI container for the scheduling core.

    Contract:
        - ``from_session()`` factory creates a fully wired orchestrator.
        - ``create_materializer()`` / ``create_customer_service()`` /
          ``create_lifecycle_service()`` bind services to a session.
        - ``create_hook()`` returns the app-launch hook.

    Non-goals:
        - Does NOT manage session lifecycle -- caller controls commits
          (the materializer commits its own pass).
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
    ) -> None:
        self._session = session
        self._clock = clock or SystemClock()
        self._actor_id = actor_id or uuid4()

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def from_session(
        cls,
        session: Session,
        clock: Clock | None = None,
        actor_id: UUID | None = None,
    ) -> RecurrenceOrchestrator:
        """Create a fully wired orchestrator from a session.

        Args:
            session: SQLAlchemy session for persistence.
            clock: Optional clock for deterministic testing.
            actor_id: Optional actor UUID for row attribution.
        """
        return cls(session=session, clock=clock, actor_id=actor_id)

    # -------------------------------------------------------------------------
    # Services
    # -------------------------------------------------------------------------

    def create_materializer(self, session: Session | None = None) -> JobMaterializer:
        """Create a JobMaterializer bound to ``session`` (default: own session)."""
        target_session = session or self._session
        return JobMaterializer(
            contracts=SqlContractSource(target_session),
            jobs=SqlJobStore(target_session),
            clock=self._clock,
            actor_id=self._actor_id,
        )

    def create_customer_service(self) -> CustomerService:
        return CustomerService(self._session, clock=self._clock, actor_id=self._actor_id)

    def create_lifecycle_service(self) -> JobLifecycleService:
        return JobLifecycleService(
            self._session, clock=self._clock, actor_id=self._actor_id,
        )

    def create_hook(self, session_factory: Callable[[], Session]) -> ForegroundHook:
        """Create the app-launch hook; each run gets its own session."""
        return build_foreground_hook(session_factory, self._clock, self._actor_id)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def session(self) -> Session:
        return self._session

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def actor_id(self) -> UUID:
        return self._actor_id


def build_foreground_hook(
    session_factory: Callable[[], Session],
    clock: Clock,
    actor_id: UUID,
) -> ForegroundHook:
    """Hook whose passes each bind a fresh materializer to their own session."""

    def materializer_for(session: Session) -> JobMaterializer:
        return JobMaterializer(
            contracts=SqlContractSource(session),
            jobs=SqlJobStore(session),
            clock=clock,
            actor_id=actor_id,
        )

    return ForegroundHook(
        session_factory=session_factory,
        materializer_factory=materializer_for,
        clock=clock,
    )


def bootstrap(settings: SchedulerSettings) -> ForegroundHook:
    """Wire logging, engine, tables and clock from settings.

    Returns the hook the app shell calls on each foreground.  No session is
    opened here; the hook opens and closes one per pass.
    """
    configure_logging(level=settings.log_level)
    init_engine_from_url(settings.database_url, echo=settings.sql_echo)
    create_tables()

    clock = SystemClock(parse_timezone(settings.timezone))

    logger.info(
        "scheduling_core_bootstrapped",
        extra={"timezone": settings.timezone},
    )
    return build_foreground_hook(
        get_session_factory(), clock, settings.actor_id or uuid4(),
    )
