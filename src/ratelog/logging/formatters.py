"""
Console line rendering for the stdio sink.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from structlog.typing import EventDict

_RESET = "\x1b[0m"

SEVERITY_COLORS = {
    "TRACE": "\x1b[36m",
    "INFO": "\x1b[32m",
    "WARN": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "FATAL": "\x1b[1;31m",
}

PART_COLORS = {
    "timestamp": "\x1b[90m",
    "caller": "\x1b[35m",
    "key": "\x1b[34m",
    "value": "\x1b[2m",
}

# Keys rendered as columns rather than as trailing key=value pairs
COLUMN_KEYS = frozenset({"level", "severity", "message", "event", "logger", "caller", "timestamp"})


def fit_right(text: str, width: int) -> str:
    """Right-align ``text`` in ``width`` columns, eliding its head when too long."""
    if width <= 0:
        return text
    if len(text) > width:
        text = text[-width:] if width <= 3 else "..." + text[-(width - 3) :]
    return text.rjust(width)


@dataclass(frozen=True)
class ConsoleFormatter:
    """Renders an event as ``timestamp | severity | caller | message key=value ...``."""

    timestamp_format: str = "%Y-%m-%d %H:%M:%S"
    level_width: int = 8
    caller_width: int = 32
    separator: str = " | "

    @property
    def timestamp_width(self) -> int:
        return len(datetime(2000, 12, 31, 23, 59, 59).strftime(self.timestamp_format))

    def _timestamp(self, raw: Any) -> str:
        when = None
        if isinstance(raw, str) and raw:
            try:
                when = datetime.fromisoformat(raw.replace("Z", "+00:00"))
            except ValueError:
                when = None
        if when is None:
            return datetime.now().strftime(self.timestamp_format)
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return when.astimezone().strftime(self.timestamp_format)

    def format(self, event_dict: EventDict, *, use_color: bool = True) -> str:
        def paint(text: str, color: str | None) -> str:
            return f"{color}{text}{_RESET}" if use_color and color else text

        severity = str(event_dict.get("severity", event_dict.get("level", "info"))).upper()
        caller = str(event_dict.get("caller") or event_dict.get("logger", "root"))
        message = str(event_dict.get("message", event_dict.get("event", "")))

        pairs = [
            f"{paint(key, PART_COLORS['key'])}={paint(str(value), PART_COLORS['value'])}"
            for key, value in event_dict.items()
            if key not in COLUMN_KEYS
        ]
        if pairs:
            message = " ".join([message, *pairs])

        columns = [
            paint(fit_right(self._timestamp(event_dict.get("timestamp")), self.timestamp_width), PART_COLORS["timestamp"]),
            paint(fit_right(severity, self.level_width), SEVERITY_COLORS.get(severity)),
            paint(fit_right(caller, self.caller_width), PART_COLORS["caller"]),
            message,
        ]
        return self.separator.join(columns)
