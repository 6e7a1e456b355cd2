"""
Tests for sbm_config -- settings loading.

Validates defaults, YAML overrides, SBM_* environment overrides (which win
over the file), and rejection of invalid values.
"""

from pathlib import Path
from uuid import UUID

import pytest
import yaml

from sbm_config import SchedulerSettings, get_settings
from sbm_config.loader import (
    env_overrides,
    load_yaml_file,
    parse_bool,
    parse_log_level,
    parse_settings,
    parse_timezone,
)


def _write(tmp_path: Path, content: dict) -> Path:
    path = tmp_path / "settings.yaml"
    path.write_text(yaml.safe_dump(content))
    return path


class TestGetSettings:
    def test_packaged_defaults(self):
        settings = get_settings(environ={})
        assert settings == SchedulerSettings()

    def test_yaml_values(self, tmp_path):
        path = _write(
            tmp_path,
            {
                "scheduler": {
                    "database_url": "sqlite:///custom.db",
                    "timezone": "America/Chicago",
                    "log_level": "debug",
                    "sql_echo": True,
                }
            },
        )
        settings = get_settings(path, environ={})
        assert settings.database_url == "sqlite:///custom.db"
        assert settings.timezone == "America/Chicago"
        assert settings.log_level == "DEBUG"
        assert settings.sql_echo is True

    def test_environment_wins(self, tmp_path):
        path = _write(tmp_path, {"scheduler": {"timezone": "America/Chicago"}})
        settings = get_settings(
            path,
            environ={
                "SBM_TIMEZONE": "Europe/London",
                "SBM_SQL_ECHO": "yes",
                "SBM_ACTOR_ID": "00000000-0000-4000-8000-000000000042",
            },
        )
        assert settings.timezone == "Europe/London"
        assert settings.sql_echo is True
        assert settings.actor_id == UUID("00000000-0000-4000-8000-000000000042")

    def test_missing_section_uses_defaults(self, tmp_path):
        path = _write(tmp_path, {"other": {"x": 1}})
        assert get_settings(path, environ={}) == SchedulerSettings()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert get_settings(path, environ={}) == SchedulerSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_settings(tmp_path / "absent.yaml", environ={})

    def test_invalid_timezone(self, tmp_path):
        path = _write(tmp_path, {"scheduler": {"timezone": "Nowhere/Special"}})
        with pytest.raises(ValueError, match="timezone"):
            get_settings(path, environ={})

    def test_logs_load(self, captured_logs):
        get_settings(environ={})
        assert any(r["message"] == "settings_loaded" for r in captured_logs())


class TestLoaderHelpers:
    def test_load_yaml_file(self, tmp_path):
        path = _write(tmp_path, {"scheduler": {"log_level": "INFO"}})
        assert load_yaml_file(path) == {"scheduler": {"log_level": "INFO"}}

    @pytest.mark.parametrize("raw", [True, "true", "1", "ON", " yes "])
    def test_parse_bool_true(self, raw):
        assert parse_bool(raw) is True

    @pytest.mark.parametrize("raw", [False, "false", "0", "off", "No"])
    def test_parse_bool_false(self, raw):
        assert parse_bool(raw) is False

    def test_parse_bool_rejects(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")

    def test_parse_timezone(self):
        assert str(parse_timezone("Asia/Tokyo")) == "Asia/Tokyo"

    def test_parse_log_level(self):
        assert parse_log_level("warning") == "WARNING"
        with pytest.raises(ValueError):
            parse_log_level("LOUD")

    def test_env_overrides_only_known_fields(self):
        overrides = env_overrides(
            {"SBM_LOG_LEVEL": "ERROR", "SBM_UNKNOWN": "x", "LOG_LEVEL": "DEBUG"}
        )
        assert overrides == {"log_level": "ERROR"}

    def test_parse_settings_invalid_actor(self):
        with pytest.raises(ValueError):
            parse_settings({"actor_id": "not-a-uuid"})
