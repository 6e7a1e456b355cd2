"""
sbm_config -- single public entrypoint for scheduling-core settings.

Responsibility:
    ``get_settings()`` is the only way to obtain configuration at runtime.
    No other component reads configuration files or environment variables.

Resolution order (later wins):
    1. ``SchedulerSettings`` defaults.
    2. The ``scheduler`` section of the YAML file (``settings.yaml`` next to
       this module unless a path is given).
    3. ``SBM_*`` environment variables.

Failure modes:
    - ``FileNotFoundError`` -- an explicit settings path does not exist.
    - ``ValueError`` -- invalid timezone, log level, boolean or UUID.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

from sbm_config.loader import env_overrides, load_yaml_file, parse_settings
from sbm_config.schema import SchedulerSettings

_logger = logging.getLogger("sbm_kernel.config")

_DEFAULT_SETTINGS_FILE = Path(__file__).parent / "settings.yaml"


def get_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> SchedulerSettings:
    """The ONLY public configuration entrypoint."""
    source = Path(path) if path is not None else _DEFAULT_SETTINGS_FILE
    data = dict(load_yaml_file(source).get("scheduler") or {})
    data.update(env_overrides(os.environ if environ is None else environ))

    settings = parse_settings(data)
    _logger.info(
        "settings_loaded",
        extra={
            "source": str(source),
            "timezone": settings.timezone,
            "log_level": settings.log_level,
        },
    )
    return settings


__all__ = [
    "SchedulerSettings",
    "get_settings",
]
