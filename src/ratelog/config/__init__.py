"""
Ratelog Configuration Module.

Implements the Nested Settings Pattern: each concern is an independent
settings class with its own environment variable prefix.

Multi-Environment Support:
    Set `RATELOG_ENV` to one of: development, testing, staging, production
    The system will load .env files in this order (later overrides earlier):
    1. .env
    2. .env.local
    3. .env.{environment}
    4. .env.{environment}.local

Usage:
    from ratelog.config import settings

    settings.logging.console_threshold
    settings.logging.sinks
"""

from functools import cached_property
import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import LogFormat, LoggingSettings


def _get_env_files() -> tuple[str, ...]:
    """
    Determine which .env files to load based on RATELOG_ENV.

    This function is called at module import time to configure the Settings class.
    """
    env = os.getenv("RATELOG_ENV", "development")
    return (
        ".env",
        ".env.local",
        f".env.{env}",
        f".env.{env}.local",
    )


class Settings(BaseSettings):
    """Composite settings aggregating all configuration domains."""

    model_config = SettingsConfigDict(
        env_file=_get_env_files(),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @cached_property
    def logging(self) -> LoggingSettings:
        return LoggingSettings(_env_file=_get_env_files())


settings = Settings()

__all__ = ["LogFormat", "LoggingSettings", "Settings", "settings"]
