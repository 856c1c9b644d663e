"""
Rate-limited logging facade.

Wraps a :class:`~ratelog.logging.core.LogBackend` and adds:

- console echo for messages at or above a configurable severity
- ``fatal_capped``: at most ``cap`` FATAL records per call site, further calls
  from that site are downgraded to ERROR (keeps alerting from flooding when a
  fatal fires inside a loop)
- caller tagging: every record carries ``"<relative-path>(<line>)"`` of the
  code that issued it

Usage:
    backend = configure_logging(settings.logging)
    log = RateLimitedLogger(backend, Severity.WARN)

    log.info("Loaded {0} rows", n)
    log.error_console("Order rejected", context_id=1000)
    for item in items:
        log.fatal_capped(3, "Could not price {0}", item)
"""

from __future__ import annotations

import sys
import threading
from pathlib import Path
from typing import Any, Mapping, Optional, TextIO

from .caller import SourceLocation, resolve_caller
from .exceptions import NotInitialized
from .logging.core import LogBackend
from .records import LogRecord, check_fields
from .severity import Severity


class RateLimitedLogger:
    def __init__(
        self,
        backend: LogBackend,
        console_threshold: Severity | str | int = Severity.ERROR,
        *,
        fatal_cap_default: Optional[int] = None,
        source_root: str | Path | None = None,
        console: Optional[TextIO] = None,
    ):
        self._backend = backend
        self._console_threshold = Severity.parse(console_threshold)
        self._fatal_cap_default = fatal_cap_default
        self._source_root = Path(source_root) if source_root is not None else Path.cwd()
        self._console = console
        # Keys are call sites, so the map is bounded by the number of
        # fatal_capped() calls in the source. Never evicted.
        self._fatal_count: dict[str, int] = {}
        self._count_lock = threading.Lock()
        self._closed = False

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def console_threshold(self) -> Severity:
        return self._console_threshold

    def set_console_threshold(self, level: Severity | str | int) -> None:
        self._console_threshold = Severity.parse(level)

    @property
    def source_root(self) -> Path:
        return self._source_root

    @property
    def backend(self) -> LogBackend:
        return self._backend

    @property
    def closed(self) -> bool:
        return self._closed

    def fatal_count(self, caller: str) -> int:
        with self._count_lock:
            return self._fatal_count.get(caller, 0)

    def fatal_counts(self) -> Mapping[str, int]:
        with self._count_lock:
            return dict(self._fatal_count)

    # =========================================================================
    # Internals
    # =========================================================================

    def _caller_key(self, location: SourceLocation) -> str:
        return location.key(self._source_root)

    def _echo(self, record: LogRecord) -> None:
        line = f"{record.severity.name} :{record.message}"
        if record.context_id is not None:
            line = f"{line}:{record.context_id}"
        stream = self._console or sys.stdout
        stream.write(line + "\n")
        stream.flush()

    def _emit(self, record: LogRecord, force_console: bool) -> None:
        if self._closed:
            raise NotInitialized("Logger has been shut down")
        if force_console or record.severity.echoes_at(self._console_threshold):
            self._echo(record)
        self._backend.emit(record)

    def _log(
        self,
        severity: Severity,
        template: str,
        args: tuple[Any, ...],
        location: SourceLocation,
        context_id: Optional[int],
        fields: dict[str, Any],
        force_console: bool = False,
    ) -> None:
        record = LogRecord(
            severity=severity,
            template=template,
            args=args,
            caller=self._caller_key(location),
            context_id=context_id,
            fields=fields,
        )
        self._emit(record, force_console)

    # =========================================================================
    # Fatal
    # =========================================================================

    def fatal(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.FATAL, template, args, location or resolve_caller(), context_id, fields)

    def fatal_console(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.FATAL, template, args, location or resolve_caller(), context_id, fields, True)

    def fatal_capped(
        self,
        cap: Optional[int],
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> Severity:
        """
        Log at FATAL for the first ``cap`` calls from this call site, at ERROR after that.

        Every call increments the call site's counter, whichever level is used.
        ``cap=None`` falls back to the configured ``fatal_cap_default``.

        Returns:
            The severity the record was emitted at.
        """
        check_fields(fields)
        if cap is None:
            cap = self._fatal_cap_default
        if cap is None:
            raise ValueError("fatal_capped() needs a cap when no fatal_cap_default is configured")

        caller = self._caller_key(location or resolve_caller())
        with self._count_lock:
            count = self._fatal_count.get(caller, 0)
            self._fatal_count[caller] = count + 1
        severity = Severity.FATAL if count < cap else Severity.ERROR

        record = LogRecord(
            severity=severity,
            template=template,
            args=args,
            caller=caller,
            context_id=context_id,
            fields=fields,
        )
        self._emit(record, force_console=False)
        return severity

    # =========================================================================
    # Error
    # =========================================================================

    def error(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.ERROR, template, args, location or resolve_caller(), context_id, fields)

    def error_console(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.ERROR, template, args, location or resolve_caller(), context_id, fields, True)

    # =========================================================================
    # Warn
    # =========================================================================

    def warn(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.WARN, template, args, location or resolve_caller(), context_id, fields)

    def warn_console(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.WARN, template, args, location or resolve_caller(), context_id, fields, True)

    # =========================================================================
    # Info
    # =========================================================================

    def info(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.INFO, template, args, location or resolve_caller(), context_id, fields)

    def info_console(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.INFO, template, args, location or resolve_caller(), context_id, fields, True)

    # =========================================================================
    # Trace
    # =========================================================================

    def trace(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.TRACE, template, args, location or resolve_caller(), context_id, fields)

    def trace_console(
        self,
        template: str,
        *args: Any,
        context_id: Optional[int] = None,
        location: Optional[SourceLocation] = None,
        **fields: Any,
    ) -> None:
        self._log(Severity.TRACE, template, args, location or resolve_caller(), context_id, fields, True)

    # =========================================================================
    # Util
    # =========================================================================

    def flush(self) -> None:
        self._backend.flush()

    def close(self) -> None:
        """Flush the backend and refuse further logging. Sinks are closed too."""
        if self._closed:
            return
        self._closed = True
        try:
            self._backend.flush()
        finally:
            self._backend.close()

    def get_log_file_path(self, target_name: Optional[str] = None) -> Path:
        """Path of the file behind ``target_name`` (default: the configured file target)."""
        return self._backend.resolve_log_file_path(target_name)
