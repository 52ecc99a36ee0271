"""Instrumentation entry point.

`instrument()` builds one `InstrumentSession` per call. The session is the
explicit context shared by every wrapper it creates: options, the emitter
(filter + observer), the async result tracker and the wrap registry. Nothing
is shared between sessions, so independent sessions can run side by side.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from .config import InstrumentOptions
from .emitter import EventEmitter, Observer
from .filters import PathFilter
from .paths import ROOT, Path
from .registry import WrapRegistry
from .tracker import AsyncResultTracker
from .traps import Traps
from .wrapper import Wrapper

logger = logging.getLogger(__name__)


class InstrumentSession:
    """Everything one `instrument()` call needs to wrap a graph lazily."""

    def __init__(self, on_event: Observer, options: InstrumentOptions | None = None) -> None:
        if not callable(on_event):
            raise TypeError(f"on_event must be callable. Got: {type(on_event).__name__}")

        self.options = options or InstrumentOptions()
        self.emitter = EventEmitter(
            on_event,
            path_filter=PathFilter(include=self.options.include, exclude=self.options.exclude),
        )
        self.tracker = AsyncResultTracker(self.emitter)
        self.registry = WrapRegistry(self._build_wrapper, depth_limit=self.options.depth_limit)

    def wrap(self, value: Any, path: Path = ROOT, depth: int = 0) -> Any:
        """Wrap `value` as if it were reached through `path` at `depth`."""
        return self.registry.wrap(value, path, depth)

    def _build_wrapper(self, value: Any, path: Path, depth: int) -> Wrapper:
        return Wrapper(value, Traps(self, path, depth))


def instrument(
    target: Any,
    on_event: Observer,
    options: InstrumentOptions | Mapping[str, Any] | None = None,
) -> Any:
    """Wrap `target` so that every interaction with it is reported to `on_event`.

    Args:
        target: Any value. Scalars (None, numbers, strings, ...) come back unchanged.
        on_event: Callable receiving one `Event` per observed operation.
        options: `InstrumentOptions` or a mapping with `enabled`, `depth_limit`,
            `include` and `exclude`.

    Returns:
        The root wrapper, or `target` itself when instrumentation is disabled or
        cannot be applied.

    Raises:
        TypeError: `on_event` is not callable.
    """
    if not callable(on_event):
        raise TypeError(f"on_event must be callable. Got: {type(on_event).__name__}")

    opts = InstrumentOptions.coerce(options)
    if not opts.enabled:
        return target

    session = InstrumentSession(on_event, opts)
    wrapped = session.wrap(target)
    if wrapped is target:
        logger.debug("instrument() returned %s unwrapped", type(target).__name__)
    return wrapped
