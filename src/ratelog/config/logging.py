"""
Logging Configuration.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ratelog.severity import Severity


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class LoggingSettings(BaseSettings):
    """Logging facade and backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="RATELOG_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    console_threshold: Severity = Field(
        default=Severity.ERROR,
        description="Echo to console when severity is at or above this level",
    )
    fatal_cap_default: Optional[int] = Field(
        default=None,
        ge=0,
        description="Cap used by fatal_capped() when no explicit cap is passed",
    )
    level: Severity = Field(default=Severity.TRACE, description="Least severe level forwarded to sinks")
    sinks: str = Field(default="async_file", description="Comma-separated sink names (stdio, file, async_file)")
    format: LogFormat = Field(default=LogFormat.CONSOLE, description="Output format for the stdio sink")
    file_path: str = Field(default="logs/ratelog.log", description="Path for file sinks, may contain {date:...}")
    file_target: str = Field(default="async_file", description="Sink queried by get_log_file_path()")
    file_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0, description="Rotation threshold for file sinks")
    file_backup_count: int = Field(default=5, ge=0, description="Rotated files kept by file sinks")
    source_root: Optional[str] = Field(
        default=None,
        description="Root that caller paths are made relative to (defaults to the working directory)",
    )
    logger_name: str = Field(default="ratelog", description="Logger name attached to every record")
    console_timestamp_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Console timestamp format",
    )
    console_level_width: int = Field(default=8, description="Console level column width")
    console_logger_width: int = Field(default=32, description="Console logger column width")
    console_separator: str = Field(default=" | ", description="Console column separator")

    @field_validator("console_threshold", "level", mode="before")
    @classmethod
    def _parse_severity(cls, value: Any) -> Severity:
        return Severity.parse(value)
