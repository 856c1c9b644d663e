"""
Core logging backend: structlog processor chain rendering to named sinks.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import structlog
from structlog.typing import EventDict, WrappedLogger

from ratelog.config.logging import LoggingSettings
from ratelog.exceptions import FileMissingAfterFlush, TargetNotFound, TargetTypeMismatch
from ratelog.records import LogRecord

from .formatters import ConsoleFormatter
from .sinks import BaseSink, FileSink, WrapperSink, build_sinks


# =============================================================================
# Structlog Processors
# =============================================================================


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO 8601 timestamp to log event unless the record carries one."""
    event_dict.setdefault("timestamp", datetime.now(timezone.utc).isoformat())
    return event_dict


def add_logger_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add logger name to log event."""
    event_dict["logger"] = event_dict.pop("_name", "root")
    return event_dict


def rename_event_key(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename 'event' to 'message'."""
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


class _NopFile:
    def write(self, s: str) -> None:
        pass

    def flush(self) -> None:
        pass


_NOP_FILE = _NopFile()


# =============================================================================
# Backend
# =============================================================================


class LogBackend:
    """
    The sink side of the facade.

    Records are passed through a structlog filtering logger whose final
    processor renders the event to every named sink. Sink errors propagate to
    the caller of ``emit``.
    """

    def __init__(
        self,
        sinks: Mapping[str, BaseSink],
        *,
        level: int = logging.DEBUG,
        name: str = "ratelog",
        file_target: Optional[str] = None,
    ):
        self._sinks: dict[str, BaseSink] = dict(sinks)
        self._name = name
        self.file_target = file_target
        self._logger = structlog.wrap_logger(
            structlog.PrintLogger(file=_NOP_FILE),
            processors=[
                structlog.stdlib.add_log_level,
                add_timestamp,
                add_logger_name,
                rename_event_key,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                self._render_to_sinks,
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
        )

    @property
    def sinks(self) -> Mapping[str, BaseSink]:
        return dict(self._sinks)

    def _render_to_sinks(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> str:
        """Render log to all configured sinks. Returns empty to suppress default output."""
        for sink in self._sinks.values():
            sink.emit(event_dict)
        return ""

    def emit(self, record: LogRecord) -> None:
        self._logger.log(record.severity.stdlib_level, record.message, _name=self._name, **record.to_event())

    def flush(self) -> None:
        for sink in self._sinks.values():
            sink.flush()

    def close(self) -> None:
        """Close every sink, even when an earlier one fails; the first error is re-raised."""
        first_error: Optional[BaseException] = None
        for sink in self._sinks.values():
            try:
                sink.close()
            except Exception as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def resolve_log_file_path(self, target_name: Optional[str] = None) -> Path:
        """
        Return the file the named sink is currently writing to.

        Wrapper sinks are unwrapped to reach the file sink. If the file is not
        on disk yet (buffered or asynchronous writes), the backend is flushed
        once and the check repeated.
        """
        target_name = target_name or self.file_target
        if not target_name or target_name not in self._sinks:
            raise TargetNotFound(target_name=str(target_name), available=list(self._sinks))

        target = self._sinks[target_name]
        file_sink = target.wrapped if isinstance(target, WrapperSink) else target
        if not isinstance(file_sink, FileSink):
            raise TargetTypeMismatch(target_name=target_name, target_type=type(file_sink).__name__)

        path = file_sink.path
        if not path.exists():
            self.flush()
            path = file_sink.path
            if not path.exists():
                raise FileMissingAfterFlush(target_name=target_name, path=str(path))
        return path


def configure_logging(settings: LoggingSettings, *, stream: Any = None) -> LogBackend:
    """
    Build the backend described by ``settings``.

    Args:
        settings: Logging settings (sinks, format, file path, filter level)
        stream: Stream for the stdio sink (default: stderr)
    """
    formatter = ConsoleFormatter(
        timestamp_format=settings.console_timestamp_format,
        level_width=settings.console_level_width,
        caller_width=settings.console_logger_width,
        separator=settings.console_separator,
    )
    sinks = build_sinks(
        settings.sinks,
        fmt=settings.format.value,
        file_path=settings.file_path,
        max_bytes=settings.file_max_bytes,
        backup_count=settings.file_backup_count,
        stream=stream,
        formatter=formatter,
    )
    return LogBackend(
        sinks,
        level=settings.level.stdlib_level,
        name=settings.logger_name,
        file_target=settings.file_target,
    )
