"""Include/exclude filtering of accessor strings.

Patterns are either literal path prefixes (`str`) or compiled regular
expressions. A literal `p` matches `p` itself and anything below it
(`p.child`, `p[0]`), never an arbitrary substring. Regexes are searched
against the full accessor.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Union

PathPattern = Union[str, re.Pattern]


def matches_pattern(accessor: str, pattern: PathPattern) -> bool:
    """Return True when a single pattern matches the accessor."""
    if isinstance(pattern, str):
        return accessor == pattern or accessor.startswith((pattern + ".", pattern + "["))
    if isinstance(pattern, re.Pattern):
        return pattern.search(accessor) is not None
    return False


def matches_any(accessor: str, patterns: Iterable[PathPattern] | None) -> bool:
    """Return True when any pattern matches; `None` or empty matches nothing."""
    if not patterns:
        return False
    return any(matches_pattern(accessor, p) for p in patterns)


def should_report(
    accessor: str,
    include: Iterable[PathPattern] | None = None,
    exclude: Iterable[PathPattern] | None = None,
) -> bool:
    """Decide whether events for `accessor` are reported.

    `include=None` allows everything while an empty `include` allows nothing.
    An `exclude` match always wins, even when an include pattern also matched.
    """
    if include is not None and not matches_any(accessor, include):
        return False
    if exclude is not None and matches_any(accessor, exclude):
        return False
    return True


class PathFilter:
    """Reusable include/exclude policy bound to one instrumentation session."""

    def __init__(
        self,
        *,
        include: Iterable[PathPattern] | None = None,
        exclude: Iterable[PathPattern] | None = None,
    ) -> None:
        self._include = tuple(include) if include is not None else None
        self._exclude = tuple(exclude) if exclude is not None else None

    @property
    def include(self) -> tuple[PathPattern, ...] | None:
        return self._include

    @property
    def exclude(self) -> tuple[PathPattern, ...] | None:
        return self._exclude

    def __call__(self, accessor: str) -> bool:
        return should_report(accessor, self._include, self._exclude)
