"""Per-session original -> wrapper bookkeeping.

Guarantees at most one live wrapper per original and breaks re-entrant wrapping
of the same original. Most Python containers (dict, list, tuple) cannot be
weakly referenced, so entries are keyed by `id(original)` and hold only a weak
reference to the wrapper. The wrapper keeps its original alive, so the id stays
valid exactly as long as the entry does; when the wrapper is collected the
weakref callback drops the entry. The registry itself keeps neither alive.
"""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Callable
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Any

from .paths import Path
from .tracker import is_deferred
from .wrapper import Wrapper, is_wrapper, unwrap

logger = logging.getLogger(__name__)

WrapperFactory = Callable[[Any, Path, int], Wrapper]

# Values with nothing worth intercepting.
_SCALAR_TYPES = (
    type(None),
    bool,
    int,
    float,
    complex,
    Decimal,
    Fraction,
    str,
    bytes,
    bytearray,
    Enum,
    type(Ellipsis),
    type(NotImplemented),
)


def is_passthrough(value: Any) -> bool:
    """Return True for scalar values that are never wrapped."""
    return isinstance(value, _SCALAR_TYPES)


class WrapRegistry:
    """Original -> wrapper cache plus the in-progress set used for cycle breaking.

    Lookup-or-insert is atomic under a re-entrant lock, so concurrent threads
    touching the same graph still get a single wrapper per original, and a
    same-thread re-entry reaches the cycle check instead of deadlocking.
    """

    def __init__(self, factory: WrapperFactory, *, depth_limit: int | None = None) -> None:
        self._factory = factory
        self._depth_limit = depth_limit
        self._lock = threading.RLock()

        # id(original) -> weakref to its wrapper
        self._entries: dict[int, weakref.ref[Wrapper]] = {}
        # ids currently being wrapped on this call stack
        self._in_progress: set[int] = set()

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for ref in self._entries.values() if ref() is not None)

    def __contains__(self, value: Any) -> bool:
        return self.lookup(value) is not None

    def lookup(self, value: Any) -> Wrapper | None:
        """Return the live wrapper for `value`, if any."""
        with self._lock:
            ref = self._entries.get(id(value))
            return ref() if ref is not None else None

    def owns(self, wrapper: Any) -> bool:
        """Return True when `wrapper` was produced by this registry."""
        return is_wrapper(wrapper) and self.lookup(unwrap(wrapper)) is wrapper

    def wrap(self, value: Any, path: Path, depth: int) -> Any:
        """Return the wrapper for `value`, creating it if needed.

        Scalars, values beyond the depth limit, deferred values, this registry's
        own wrappers, and values already being wrapped higher up the stack pass
        through unchanged. If a wrapper cannot be built the original is
        returned as-is.
        """
        if is_passthrough(value):
            return value
        if self._depth_limit is not None and depth > self._depth_limit:
            return value
        if is_deferred(value):
            return value

        with self._lock:
            if self.owns(value):
                return value

            key = id(value)
            ref = self._entries.get(key)
            cached = ref() if ref is not None else None
            if cached is not None:
                return cached

            if key in self._in_progress:
                return value

            self._in_progress.add(key)
            try:
                wrapper = self._factory(value, path, depth)
                self._entries[key] = weakref.ref(wrapper, self._release_callback(key))
            except Exception:  # noqa: BLE001 - degrade to the unwrapped original
                logger.debug("Could not wrap %s at %r", type(value).__name__, path, exc_info=True)
                return value
            finally:
                self._in_progress.discard(key)
            return wrapper

    def _release_callback(self, key: int) -> Callable[[weakref.ref[Wrapper]], None]:
        entries = self._entries
        lock = self._lock

        def _release(ref: weakref.ref[Wrapper]) -> None:
            with lock:
                if entries.get(key) is ref:
                    del entries[key]

        return _release
