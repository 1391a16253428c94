"""Caller-context extraction for diagnostic attribution of log records.

The dispatcher wants to know which application file invoked ``send``. The
stack is captured as structured frames, every leading frame that lives inside
this package is discarded, and the remaining frames are rendered as
``at <function> (<path>:<line>:<column>)`` lines. The file path is parsed back
out of the topmost rendered line so a frame that cannot be rendered in that
shape simply yields ``None``.

Nothing in here may raise: the result is best-effort metadata.
"""

from __future__ import annotations

import os
import re
import sys
import traceback
from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

PACKAGE_ROOT = str(Path(__file__).resolve().parents[1]) + os.sep

_FRAME_RE = re.compile(r"^.* \((.*):[0-9]+:[0-9]+\)$")


@dataclass(frozen=True, slots=True)
class CallerContext:
    """Stack rendered from the application's point of view plus its source file."""

    stack_trace: str
    file: str | None


def format_frame(frame: traceback.FrameSummary) -> str:
    """Render ``frame`` as ``at name (path:line:column)`` (1-based column).

    Examples
    --------
    >>> frame = traceback.FrameSummary("/srv/app.py", 12, "handler", lookup_line=False)
    >>> format_frame(frame)
    '    at handler (/srv/app.py:12:1)'
    """

    colno = getattr(frame, "colno", None)
    column = colno + 1 if colno is not None else 1
    return f"    at {frame.name} ({frame.filename}:{frame.lineno}:{column})"


def parse_file(line: str | None) -> str | None:
    """Return the path component of a rendered frame line, ``None`` when absent.

    Examples
    --------
    >>> parse_file("    at handler (/srv/app.py:12:1)")
    '/srv/app.py'
    >>> parse_file("    at <native code>") is None
    True
    """

    if line is None:
        return None
    match = _FRAME_RE.match(line)
    return match.group(1) if match is not None else None


@lru_cache(maxsize=512)
def _real_path(filename: str) -> str:
    return os.path.realpath(filename)


def _belongs_to(frame: traceback.FrameSummary, prefixes: Sequence[str]) -> bool:
    filename = frame.filename or ""
    # symlinked installs: compare both the path as imported and its real target
    candidates = (filename, _real_path(filename)) if filename else (filename,)
    return any(candidate.startswith(prefix) for candidate in candidates for prefix in prefixes)


def _live_frames() -> list[traceback.FrameSummary]:
    # deepest first; source lines are never read
    return list(traceback.StackSummary.extract(traceback.walk_stack(sys._getframe(1)), lookup_lines=False))


def extract_caller_context(
    *,
    frames: Sequence[traceback.FrameSummary] | None = None,
    skip_prefixes: Sequence[str] | None = None,
) -> CallerContext:
    """Capture the stack as seen by the code that called into this package.

    Parameters
    ----------
    frames:
        Frames ordered deepest call first. ``None`` captures the live stack.
    skip_prefixes:
        Path prefixes whose leading frames are dropped; defaults to the
        package directory.
    """

    prefixes = tuple(skip_prefixes) if skip_prefixes is not None else (PACKAGE_ROOT,)
    if frames is None:
        frames = _live_frames()

    remaining = list(frames)
    while remaining and _belongs_to(remaining[0], prefixes):
        remaining.pop(0)

    lines = [format_frame(frame) for frame in remaining]
    top = lines[0] if lines else None
    return CallerContext(stack_trace="\n".join(lines), file=parse_file(top))


__all__ = ["CallerContext", "PACKAGE_ROOT", "extract_caller_context", "format_frame", "parse_file"]
