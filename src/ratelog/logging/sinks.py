"""
Log sink abstractions and concrete implementations.
"""

from __future__ import annotations

import queue
import sys
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Literal, Optional

import orjson
from structlog.typing import EventDict

from .formatters import ConsoleFormatter

LogFormat = Literal["console", "json"]


def orjson_dumps(v: Any, *, default: Any = str) -> str:
    """Fast JSON serialization using orjson."""
    return orjson.dumps(v, default=default, option=orjson.OPT_UTC_Z | orjson.OPT_NAIVE_UTC).decode()


# =============================================================================
# Sink Abstraction (Strategy Pattern)
# =============================================================================


class BaseSink(ABC):
    """Abstract base class for log sinks."""

    @abstractmethod
    def emit(self, event_dict: EventDict) -> None:
        """Emit a log event to the sink."""
        ...

    def flush(self) -> None:
        """Push buffered events to their destination."""

    @abstractmethod
    def close(self) -> None:
        """Close the sink and release resources."""
        ...


class WrapperSink(BaseSink):
    """A sink that decorates another sink."""

    def __init__(self, wrapped: BaseSink):
        self.wrapped = wrapped


class StdioSink(BaseSink):
    """Standard I/O sink with configurable format.

    Args:
        fmt: Output format - "console" (colored human-readable) or "json"
        stream: Output stream (default: stderr at emit time)
        formatter: Console line layout (default: ConsoleFormatter())
    """

    def __init__(self, fmt: LogFormat = "console", stream: Any = None, formatter: Optional[ConsoleFormatter] = None):
        self._fmt = fmt
        self._stream = stream
        self.formatter = formatter or ConsoleFormatter()

    @property
    def stream(self) -> Any:
        return self._stream or sys.stderr

    def emit(self, event_dict: EventDict) -> None:
        stream = self.stream
        if self._fmt == "json":
            output = orjson_dumps(event_dict)
        else:
            use_color = bool(getattr(stream, "isatty", lambda: False)())
            output = self.formatter.format(event_dict, use_color=use_color)

        stream.write(output + "\n")
        stream.flush()

    def flush(self) -> None:
        self.stream.flush()

    def close(self) -> None:
        pass


class FileSink(BaseSink):
    """Local file sink with rotation (JSON lines).

    The path may contain ``{date:<strftime>}`` placeholders, rendered with the
    local time whenever the sink (re)opens its file. Nothing is created on disk
    until the first event is written.
    """

    def __init__(self, path: str | Path, max_bytes: int = 10 * 1024 * 1024, backup_count: int = 5):
        self._pattern = str(path)
        self._max_bytes = max_bytes
        self._backup_count = backup_count
        self._path: Optional[Path] = None
        self._file: Any = None
        self._lock = threading.Lock()

    def render_path(self, now: Optional[datetime] = None) -> Path:
        return Path(self._pattern.format(date=now or datetime.now()))

    @property
    def path(self) -> Path:
        """The file currently written to, or the one the next event would open."""
        return self._path or self.render_path()

    def emit(self, event_dict: EventDict) -> None:
        json_str = orjson_dumps(event_dict)
        with self._lock:
            self._ensure_open()
            self._file.write(json_str + "\n")
            self._file.flush()
            self._maybe_rotate()

    def _ensure_open(self) -> None:
        path = self.render_path()
        if self._file is not None and path == self._path:
            return
        if self._file is not None:
            self._file.close()
        path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(path, "a", encoding="utf-8")
        self._path = path

    @staticmethod
    def _backup_path(path: Path, index: int) -> Path:
        return path.with_suffix(f".{index}{path.suffix}")

    def _maybe_rotate(self) -> None:
        path = self._path
        if self._backup_count <= 0 or path is None:
            return
        if path.stat().st_size <= self._max_bytes:
            return
        self._file.close()
        for i in range(self._backup_count - 1, 0, -1):
            src = self._backup_path(path, i)
            if src.exists():
                src.replace(self._backup_path(path, i + 1))
        path.replace(self._backup_path(path, 1))
        self._file = open(path, "a", encoding="utf-8")

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None


class AsyncSink(WrapperSink):
    """Hands events to a worker thread so callers never block on I/O.

    A failure inside the wrapped sink is re-raised on the next ``emit`` or
    ``flush`` call.
    """

    _STOP = object()

    def __init__(self, wrapped: BaseSink, maxsize: int = 0):
        super().__init__(wrapped)
        self._queue: queue.Queue[Any] = queue.Queue(maxsize)
        self._error: Optional[BaseException] = None
        self._closed = False
        self._thread = threading.Thread(
            target=self._run,
            name=f"ratelog-{type(wrapped).__name__}",
            daemon=True,
        )
        self._thread.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is self._STOP:
                    return
                try:
                    self.wrapped.emit(item)
                except Exception as exc:
                    self._error = exc
            finally:
                self._queue.task_done()

    def _raise_pending(self) -> None:
        error, self._error = self._error, None
        if error is not None:
            raise error

    def emit(self, event_dict: EventDict) -> None:
        if self._closed:
            raise RuntimeError("Cannot emit to a closed AsyncSink")
        self._raise_pending()
        self._queue.put(dict(event_dict))

    def flush(self) -> None:
        """Block until every queued event has reached the wrapped sink."""
        if not self._closed:
            self._queue.join()
        self._raise_pending()
        self.wrapped.flush()

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put(self._STOP)
            self._thread.join()
        self.wrapped.close()
        self._raise_pending()


# =============================================================================
# Factory
# =============================================================================

SINK_NAMES = ("stdio", "file", "async_file")


def build_sinks(
    sinks: str,
    *,
    fmt: str = "console",
    file_path: str | Path = "logs/ratelog.log",
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
    stream: Any = None,
    formatter: Optional[ConsoleFormatter] = None,
) -> dict[str, BaseSink]:
    """Create named sinks from a comma-separated list (stdio, file, async_file)."""
    log_format: LogFormat = "json" if fmt.lower() == "json" else "console"

    built: dict[str, BaseSink] = {}
    for name in (s.strip().lower() for s in sinks.split(",")):
        if not name or name in built:
            continue
        if name == "stdio":
            built[name] = StdioSink(fmt=log_format, stream=stream, formatter=formatter)
        elif name == "file":
            built[name] = FileSink(file_path, max_bytes=max_bytes, backup_count=backup_count)
        elif name == "async_file":
            built[name] = AsyncSink(FileSink(file_path, max_bytes=max_bytes, backup_count=backup_count))
        else:
            raise ValueError(f"Unknown sink '{name}'; expected one of {', '.join(SINK_NAMES)}")
    return built
