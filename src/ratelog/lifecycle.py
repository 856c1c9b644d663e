"""
Process-wide logger lifecycle.

Applications that prefer explicit wiring can build a
:class:`~ratelog.logger.RateLimitedLogger` themselves and pass it around.
This module keeps one shared instance for code that cannot be handed one.

NOTE: do not cache the result of ``current_instance()`` across a possible
``shutdown()``. A reference obtained before a concurrent shutdown points at a
closed logger, and every logging call on it raises ``NotInitialized``. Call
``current_instance()`` for each use instead.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

from .config import settings as _settings
from .config.logging import LoggingSettings
from .exceptions import AlreadyInitialized, NotInitialized
from .logger import RateLimitedLogger
from .logging.core import LogBackend, configure_logging
from .severity import Severity

_instance: Optional[RateLimitedLogger] = None
_sync_root = threading.Lock()


def initialize(
    console_threshold: Severity | str | int | None = None,
    *,
    settings: Optional[LoggingSettings] = None,
    backend: Optional[LogBackend] = None,
) -> RateLimitedLogger:
    """
    Create the shared logger.

    Args:
        console_threshold: Echo to console at or above this severity
            (default: ``settings.console_threshold``, ERROR unless configured)
        settings: Logging settings (default: ``ratelog.config.settings.logging``)
        backend: Prebuilt backend; when omitted one is built from ``settings``

    Raises:
        AlreadyInitialized: a shared logger is already live
    """
    global _instance

    with _sync_root:
        if _instance is not None:
            raise AlreadyInitialized()

        cfg = settings or _settings.logging
        if backend is None:
            backend = configure_logging(cfg)
        threshold = cfg.console_threshold if console_threshold is None else console_threshold

        _instance = RateLimitedLogger(
            backend,
            threshold,
            fatal_cap_default=cfg.fatal_cap_default,
            source_root=cfg.source_root,
        )
        return _instance


def current_instance() -> RateLimitedLogger:
    with _sync_root:
        if _instance is None:
            raise NotInitialized("initialize() has NOT been called")
        return _instance


def is_initialized() -> bool:
    with _sync_root:
        return _instance is not None


def shutdown() -> None:
    """Flush and close the shared logger, then forget it."""
    global _instance

    with _sync_root:
        if _instance is None:
            raise NotInitialized("shutdown() called before initialize()")
        try:
            _instance.close()
        finally:
            _instance = None


def get_log_file_path(target_name: Optional[str] = None) -> Path:
    """Resolve the on-disk file of a named sink of the shared logger."""
    return current_instance().get_log_file_path(target_name)
