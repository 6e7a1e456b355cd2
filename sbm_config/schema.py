"""
Settings schema.

``SchedulerSettings`` is the only runtime configuration artifact.  The
loader parses YAML (and environment overrides) into it; nothing else reads
configuration files or environment variables.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class SchedulerSettings:
    """Runtime settings for the scheduling core."""

    database_url: str = "sqlite:///sbm.db"
    timezone: str = "UTC"  # IANA zone that defines "today"
    log_level: str = "INFO"
    sql_echo: bool = False
    actor_id: UUID | None = None  # Attributed on rows written by passes
