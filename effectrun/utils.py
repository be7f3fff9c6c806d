"""
Utility functions and environment configuration for effectrun.
"""

from __future__ import annotations

import linecache
import os
import sys
from dataclasses import dataclass, field
from typing import Any


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


# Capture a multi-frame creation stack for every effect
DEBUG_EFFECTS = _env_flag("EFFECTRUN_DEBUG")

# Report every resolution step through loguru when no on_step hook is given
TRACE_STEPS = _env_flag("EFFECTRUN_TRACE")


@dataclass(frozen=True)
class CodeLocation:
    """
    Location information for a code point.

    Attributes:
        filename: Source file path.
        line: Line number in the source file.
        function: Function name where the code is located.
        code: Optional source code snippet.
        stack: Outer frames, only collected when ``EFFECTRUN_DEBUG`` is set.
    """

    filename: str
    line: int
    function: str
    code: str | None = None
    stack: tuple[CodeLocation, ...] = field(default=(), compare=False, repr=False)

    def format(self) -> str:
        """Format as 'filename:line in function'."""
        return f"{self.filename}:{self.line} in {self.function}"


_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _is_effectrun_internal(path: str) -> bool:
    return os.path.abspath(path).startswith(_PACKAGE_DIR + os.sep)


def _location(frame: Any) -> CodeLocation:
    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None
    return CodeLocation(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
    )


def capture_creation_context(skip_frames: int = 2) -> CodeLocation | None:
    """
    Capture where an effect was created.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        CodeLocation of the creating frame, with outer frames attached when
        ``EFFECTRUN_DEBUG`` is enabled. ``None`` if frames are unavailable.
    """
    try:
        frame = sys._getframe(skip_frames)
    except (AttributeError, ValueError):
        # sys._getframe() is missing on some Python implementations
        return None

    location = _location(frame)
    if not DEBUG_EFFECTS:
        return location

    outer: list[CodeLocation] = []
    current = frame.f_back
    while current is not None and len(outer) < 12:
        if not _is_effectrun_internal(current.f_code.co_filename):
            outer.append(_location(current))
        current = current.f_back

    return CodeLocation(
        filename=location.filename,
        line=location.line,
        function=location.function,
        code=location.code,
        stack=tuple(outer),
    )


__all__ = [
    "DEBUG_EFFECTS",
    "TRACE_STEPS",
    "CodeLocation",
    "capture_creation_context",
]
