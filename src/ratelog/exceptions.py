"""
Ratelog exception hierarchy.

Errors are split along two axes: lifecycle misuse of the process-wide logger,
and failures resolving a named sink to the file it writes.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RateLogError(Exception):
    """Base class for every error raised by ratelog."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.details = details or {}


# ================================
# Lifecycle errors
# ================================


class LifecycleError(RateLogError):
    """Logger used out of its initialize/shutdown order."""

    pass


class NotInitialized(LifecycleError):
    """Raised when the logger is used before initialize() or after shutdown()."""

    def __init__(self, message: str = "Logger has not been initialized") -> None:
        super().__init__(message, code="NOT_INITIALIZED")


class AlreadyInitialized(LifecycleError):
    """Raised when initialize() is called while a logger is still live."""

    def __init__(self) -> None:
        super().__init__(
            "Logger has already been initialized; call shutdown() first",
            code="ALREADY_INITIALIZED",
        )


# ================================
# Target resolution errors
# ================================


class TargetError(RateLogError):
    """Base class for log-file-path query failures."""

    pass


class TargetNotFound(TargetError):
    def __init__(self, *, target_name: str, available: Optional[list[str]] = None) -> None:
        available = sorted(available or [])
        if available:
            message = f"Could not find target named '{target_name}' (available: {', '.join(available)})"
        else:
            message = f"Could not find target named '{target_name}': no sinks are configured"
        super().__init__(
            message,
            code="TARGET_NOT_FOUND",
            details={"target_name": target_name, "available": available},
        )


class TargetTypeMismatch(TargetError):
    def __init__(self, *, target_name: str, target_type: str) -> None:
        super().__init__(
            f"Target '{target_name}' is a {target_type}, not a file-backed sink",
            code="TARGET_TYPE_MISMATCH",
            details={"target_name": target_name, "target_type": target_type},
        )


class FileMissingAfterFlush(TargetError):
    def __init__(self, *, target_name: str, path: str) -> None:
        super().__init__(
            f"Logfile {path} does not exist even after flush",
            code="FILE_MISSING_AFTER_FLUSH",
            details={"target_name": target_name, "path": path},
        )
