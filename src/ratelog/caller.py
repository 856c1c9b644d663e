"""
Caller identity for log calls.

A call site is identified by ``"<relative-path>(<line>)"``. The path is made
relative to a configurable source root so keys are stable across machines;
files outside the root keep their absolute path.
"""

from __future__ import annotations

import inspect
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SourceLocation:
    file: str
    line: int

    @classmethod
    def here(cls, stacklevel: int = 1) -> "SourceLocation":
        """Capture the location of the code calling ``here()``."""
        return resolve_caller(stacklevel)

    def key(self, root: str | Path | None = None) -> str:
        return f"{relative_path(self.file, root)}({self.line})"


def relative_path(file: str, root: str | Path | None = None) -> str:
    path = os.path.abspath(file)
    if root is None:
        return Path(path).as_posix()
    root = os.path.abspath(root)
    try:
        if os.path.commonpath([path, root]) != root:
            return Path(path).as_posix()
    except ValueError:
        # Different drives on Windows
        return Path(path).as_posix()
    return Path(os.path.relpath(path, root)).as_posix()


def resolve_caller(stacklevel: int = 1) -> SourceLocation:
    """
    Return the source location ``stacklevel`` frames above the function
    calling ``resolve_caller``.

    ``stacklevel=1`` is the caller of that function, which is what a public
    logging method passes to find the code that invoked it.
    """
    frame = inspect.currentframe()
    if frame is None:
        return SourceLocation("<unknown>", 0)

    try:
        # Skip resolve_caller itself
        frame = frame.f_back
        for _ in range(stacklevel):
            if frame is None or frame.f_back is None:
                break
            frame = frame.f_back
        if frame is None:
            return SourceLocation("<unknown>", 0)
        return SourceLocation(frame.f_code.co_filename, frame.f_lineno)
    finally:
        del frame
