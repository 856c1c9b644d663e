"""
Logging backend for ratelog.

Provides the sink side of the facade:
- stdio: Standard output (console/json format)
- file: Local file with rotation (JSON lines)
- async_file: File sink fed by a worker thread

Design Pattern: Strategy Pattern for sink abstraction.
Library: structlog + orjson for high-performance JSON serialization.
"""

from .core import LogBackend, configure_logging
from .sinks import AsyncSink, BaseSink, FileSink, StdioSink, WrapperSink, build_sinks

__all__ = [
    "AsyncSink",
    "BaseSink",
    "FileSink",
    "LogBackend",
    "StdioSink",
    "WrapperSink",
    "build_sinks",
    "configure_logging",
]
