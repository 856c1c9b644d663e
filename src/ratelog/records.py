"""
Immutable log records passed from the facade to the backend.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from .severity import Severity


# Keys the record and the backend pipeline set themselves
RESERVED_FIELDS = frozenset(
    {"caller", "context_id", "event", "level", "logger", "message", "severity", "timestamp", "_name"}
)


def check_fields(fields: Mapping[str, Any]) -> None:
    clashes = sorted(RESERVED_FIELDS.intersection(fields))
    if clashes:
        raise ValueError(f"Reserved field name(s) cannot be used as structured fields: {', '.join(clashes)}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LogRecord:
    severity: Severity
    template: str
    args: tuple[Any, ...] = ()
    caller: str = ""
    context_id: Optional[int] = None
    fields: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        check_fields(self.fields)

    @property
    def message(self) -> str:
        """Template rendered with the positional arguments.

        A mismatch between placeholders and arguments raises the usual
        IndexError/KeyError/ValueError from ``str.format``.
        """
        if not self.args:
            return self.template
        return self.template.format(*self.args)

    def to_event(self) -> dict[str, Any]:
        """Structured fields handed to the backend logger."""
        event: dict[str, Any] = dict(self.fields)
        event["severity"] = self.severity.name
        event["caller"] = self.caller
        if self.context_id is not None:
            event["context_id"] = self.context_id
        event["timestamp"] = self.timestamp.isoformat()
        return event
