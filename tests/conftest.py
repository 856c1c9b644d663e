import io
from pathlib import Path

import pytest
from structlog.typing import EventDict

from ratelog import lifecycle
from ratelog.logger import RateLimitedLogger
from ratelog.logging.core import LogBackend
from ratelog.logging.sinks import BaseSink
from ratelog.severity import Severity


class RecordingSink(BaseSink):
    """Keeps every rendered event in memory."""

    def __init__(self) -> None:
        self.events: list[EventDict] = []
        self.flushes = 0
        self.closed = False

    def emit(self, event_dict: EventDict) -> None:
        self.events.append(dict(event_dict))

    def flush(self) -> None:
        self.flushes += 1

    def close(self) -> None:
        self.closed = True

    @property
    def severities(self) -> list[str]:
        return [e["severity"] for e in self.events]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def backend(sink: RecordingSink) -> LogBackend:
    return LogBackend({"memory": sink})


@pytest.fixture
def console() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def logger(backend: LogBackend, console: io.StringIO) -> RateLimitedLogger:
    return RateLimitedLogger(
        backend,
        Severity.ERROR,
        source_root=Path(__file__).parent,
        console=console,
    )


@pytest.fixture(autouse=True)
def reset_lifecycle():
    """Make sure no shared logger leaks between tests."""
    yield
    if lifecycle.is_initialized():
        lifecycle.shutdown()
