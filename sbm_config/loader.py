"""
Settings loader (``sbm_config.loader``).

Responsibility
--------------
Loads a YAML settings file, applies ``SBM_*`` environment overrides, and
parses the result into a frozen ``SchedulerSettings``.  The public entry
point is ``sbm_config.get_settings()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown timezone, log level, boolean or UUID  -> ``ValueError``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from sbm_config.schema import SchedulerSettings

ENV_PREFIX = "SBM_"

_FIELDS = ("database_url", "timezone", "log_level", "sql_echo", "actor_id")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def parse_timezone(value: str) -> ZoneInfo:
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {value!r}") from exc


def parse_log_level(value: str) -> str:
    level = str(value).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown log level: {value!r}")
    return level


def env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect ``SBM_<FIELD>`` values for known fields."""
    overrides: dict[str, str] = {}
    for name in _FIELDS:
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in environ:
            overrides[name] = environ[key]
    return overrides


def parse_settings(data: dict[str, Any]) -> SchedulerSettings:
    """Parse the ``scheduler`` mapping into SchedulerSettings.

    Missing keys take the schema defaults.

    Raises:
        ValueError: on an invalid timezone, log level, boolean or UUID.
    """
    defaults = SchedulerSettings()

    timezone = str(data.get("timezone", defaults.timezone))
    parse_timezone(timezone)

    actor_id = data.get("actor_id")

    return SchedulerSettings(
        database_url=str(data.get("database_url", defaults.database_url)),
        timezone=timezone,
        log_level=parse_log_level(data.get("log_level", defaults.log_level)),
        sql_echo=parse_bool(data.get("sql_echo", defaults.sql_echo)),
        actor_id=UUID(str(actor_id)) if actor_id else None,
    )
