"""
ForegroundHook -- the app shell's entry point for a catch-up pass.

Contract:
    ``run_once()`` opens a fresh session, runs one materialization pass for
    the target day (default: the clock's today), and closes the session.
    A failed pass is logged and reported as ``None``; the end user sees
    nothing, and the next invocation retries from scratch.

Architecture: sbm_recurrence/services.  Wraps JobMaterializer with
    session lifecycle, the way the shell calls it on each foreground.

Non-goals:
    - NOT a scheduler: no background thread, no timer.
    - Does NOT retry internally.
"""

from __future__ import annotations

from typing import Any, Callable

from sqlalchemy.orm import Session

from sbm_kernel.domain.clock import Clock, SystemClock
from sbm_kernel.exceptions import SBMKernelError
from sbm_kernel.logging_config import get_logger

from sbm_recurrence.domain.types import MaterializationResult
from sbm_recurrence.services.materializer import JobMaterializer

logger = get_logger("recurrence.hook")


class ForegroundHook:
    """Run one materialization pass per invocation.

    Args:
        session_factory: Callable returning a new Session per pass.
        materializer_factory: Builds a JobMaterializer bound to a session.
        clock: Supplies "today" when no target is given.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        materializer_factory: Callable[[Session], JobMaterializer],
        clock: Clock | None = None,
    ):
        self._session_factory = session_factory
        self._materializer_factory = materializer_factory
        self._clock = clock or SystemClock()

    def run_once(self, target_date: Any = None) -> MaterializationResult | None:
        """Materialize jobs for ``target_date`` (default: today).

        Returns the pass result, or None if the pass failed.
        """
        target = target_date if target_date is not None else self._clock.today()
        session = self._session_factory()
        try:
            materializer = self._materializer_factory(session)
            return materializer.materialize(target)
        except SBMKernelError:
            logger.exception(
                "foreground_pass_failed",
                extra={"requested_date": str(target)},
            )
            return None
        finally:
            session.close()

    def materialized_count(self, target_date: Any = None) -> int:
        """Number of jobs created by one pass; 0 when the pass failed."""
        result = self.run_once(target_date)
        return result.created if result is not None else 0
