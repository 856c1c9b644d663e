"""
Logging settings tests.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from ratelog.config import Settings
from ratelog.config.logging import LogFormat, LoggingSettings
from ratelog.severity import Severity


class TestLoggingSettings:
    def test_defaults(self, monkeypatch) -> None:
        for key in ("CONSOLE_THRESHOLD", "FATAL_CAP_DEFAULT", "SINKS", "FILE_TARGET", "LEVEL"):
            monkeypatch.delenv(f"RATELOG_LOG_{key}", raising=False)
        cfg = LoggingSettings(_env_file=None)
        assert cfg.console_threshold is Severity.ERROR
        assert cfg.fatal_cap_default is None
        assert cfg.level is Severity.TRACE
        assert cfg.sinks == "async_file"
        assert cfg.file_target == "async_file"
        assert cfg.format is LogFormat.CONSOLE

    def test_environment_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("RATELOG_LOG_CONSOLE_THRESHOLD", "warn")
        monkeypatch.setenv("RATELOG_LOG_FATAL_CAP_DEFAULT", "3")
        monkeypatch.setenv("RATELOG_LOG_LEVEL", "INFO")
        monkeypatch.setenv("RATELOG_LOG_FORMAT", "json")
        cfg = LoggingSettings(_env_file=None)
        assert cfg.console_threshold is Severity.WARN
        assert cfg.fatal_cap_default == 3
        assert cfg.level is Severity.INFO
        assert cfg.format is LogFormat.JSON

    def test_invalid_threshold_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(_env_file=None, console_threshold="loud")

    def test_negative_cap_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(_env_file=None, fatal_cap_default=-1)

    def test_settings_are_frozen(self) -> None:
        cfg = LoggingSettings(_env_file=None)
        with pytest.raises(ValidationError):
            cfg.sinks = "stdio"


class TestCompositeSettings:
    def test_logging_sub_settings_are_cached(self) -> None:
        settings = Settings()
        assert settings.logging is settings.logging
        assert isinstance(settings.logging, LoggingSettings)
