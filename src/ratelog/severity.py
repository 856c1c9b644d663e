"""
Severity levels for the rate-limited logger.

Lower ordinal means more severe. Console echo compares against a threshold
using this order: a message is echoed when ``severity <= threshold``.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any


class Severity(IntEnum):
    FATAL = 0
    ERROR = 1
    WARN = 2
    INFO = 3
    TRACE = 4

    @classmethod
    def parse(cls, value: Any) -> "Severity":
        """Accept a Severity, an ordinal, or a case-insensitive level name."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            name = value.strip().upper()
            if name.isdigit():
                return cls(int(name))
            name = _ALIASES.get(name, name)
            try:
                return cls[name]
            except KeyError:
                pass
        raise ValueError(f"Unknown severity: {value!r}")

    def echoes_at(self, threshold: "Severity") -> bool:
        return self <= threshold

    @property
    def stdlib_level(self) -> int:
        return _STDLIB_LEVELS[self]


_ALIASES = {
    "CRITICAL": "FATAL",
    "WARNING": "WARN",
    "DEBUG": "TRACE",
}

_STDLIB_LEVELS = {
    Severity.FATAL: logging.CRITICAL,
    Severity.ERROR: logging.ERROR,
    Severity.WARN: logging.WARNING,
    Severity.INFO: logging.INFO,
    Severity.TRACE: logging.DEBUG,
}
