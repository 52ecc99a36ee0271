"""Access paths and their accessor-string rendering.

A `Path` records how a nested value was reached from the instrumentation root.
It renders to a Python-flavoured accessor such as `a.b[2].c` or
`config["user-name"]` for diagnostics. Rendering is total: unusual keys fall
back to a bracketed `repr`, so it never raises.
"""

from __future__ import annotations

import json
import keyword
from collections.abc import Iterable
from enum import Enum
from typing import Any


class Marker(str):
    """A synthetic path segment rendered verbatim (not valid access syntax)."""

    __slots__ = ()


SYNC_RESULT = Marker("[sync-result]")
CONSTRUCTED = Marker("[constructed]")


def _is_identifier(segment: str) -> bool:
    return segment.isidentifier() and not keyword.iskeyword(segment)


def _describe(segment: Any) -> str:
    """Best-effort text for a symbolic key; diagnostic only, not re-parseable."""
    try:
        return repr(segment)
    except Exception:  # noqa: BLE001 - rendering must never raise
        return f"<{type(segment).__name__}>"


def _render_slice(segment: slice) -> str:
    start = "" if segment.start is None else _describe(segment.start)
    stop = "" if segment.stop is None else _describe(segment.stop)
    if segment.step is None:
        return f"[{start}:{stop}]"
    return f"[{start}:{stop}:{_describe(segment.step)}]"


def _render_segment(segment: Any, index: int) -> str:
    if isinstance(segment, Marker):
        return str(segment)

    # Enum members are the closest thing Python has to globally registered symbols.
    if isinstance(segment, Enum):
        return f"[{type(segment).__name__}.{segment.name}]"

    if isinstance(segment, str):
        if segment.isascii() and segment.isdigit():
            return f"[{segment}]"
        if _is_identifier(segment):
            return segment if index == 0 else f".{segment}"
        return f"[{json.dumps(segment, ensure_ascii=False)}]"

    if isinstance(segment, (int, float)) and not isinstance(segment, bool):
        return f"[{segment!r}]"

    if isinstance(segment, slice):
        return _render_slice(segment)

    return f"[{_describe(segment)}]"


def render(path: Iterable[Any]) -> str:
    """Render a sequence of path segments as an accessor string.

    Identifier-shaped names join with `.`, numbers and other keys use bracket
    notation, and markers such as `[sync-result]` are appended as-is. An empty
    path renders to the empty string.
    """
    return "".join(_render_segment(segment, index) for index, segment in enumerate(path))


class Path(tuple):
    """Immutable route from the instrumentation root to a nested value."""

    __slots__ = ()

    def child(self, segment: Any) -> Path:
        """Return a new path with one segment appended."""
        return Path((*self, segment))

    @property
    def accessor(self) -> str:
        """Accessor string, recomputed on each read."""
        return render(self)

    def __repr__(self) -> str:
        return f"Path({self.accessor!r})"


ROOT = Path()
