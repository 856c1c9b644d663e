"""
Rate-limited logging facade.

    import ratelog

    log = ratelog.initialize(ratelog.Severity.WARN)
    log.info("x")
    log.fatal_capped(2, "z")
    ratelog.shutdown()
"""

from .caller import SourceLocation
from .exceptions import (
    AlreadyInitialized,
    FileMissingAfterFlush,
    NotInitialized,
    RateLogError,
    TargetNotFound,
    TargetTypeMismatch,
)
from .lifecycle import current_instance, get_log_file_path, initialize, is_initialized, shutdown
from .logger import RateLimitedLogger
from .records import LogRecord
from .severity import Severity

__all__ = [
    "AlreadyInitialized",
    "FileMissingAfterFlush",
    "LogRecord",
    "NotInitialized",
    "RateLimitedLogger",
    "RateLogError",
    "Severity",
    "SourceLocation",
    "TargetNotFound",
    "TargetTypeMismatch",
    "current_instance",
    "get_log_file_path",
    "initialize",
    "is_initialized",
    "shutdown",
]
