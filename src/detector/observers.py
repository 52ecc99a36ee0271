"""Ready-made observers (callables accepting one `Event`)."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Protocol

from .models import Event, EventType


class EventObserver(Protocol):
    """Anything `instrument()` accepts as `on_event`."""

    def __call__(self, event: Event) -> object:
        """Handle a single event."""


class InMemoryEventCollector:
    """In-memory observer for tests and local debugging."""

    def __init__(self) -> None:
        """Create an empty collector."""
        self._lock = threading.Lock()
        self._events: list[Event] = []

    def __call__(self, event: Event) -> None:
        """Append an event (thread-safe)."""
        with self._lock:
            self._events.append(event)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def snapshot(self) -> Sequence[Event]:
        """Return a point-in-time copy of all collected events."""
        with self._lock:
            return list(self._events)

    def of_type(self, *types: EventType) -> list[Event]:
        """Return collected events whose type is one of `types`."""
        with self._lock:
            return [e for e in self._events if e.type in types]

    def accessors(self, *types: EventType) -> list[str]:
        """Accessors of collected events, optionally narrowed to `types`."""
        events = self.of_type(*types) if types else self.snapshot()
        return [e.accessor for e in events]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class LoggingObserver:
    """Logs each event as a structured record.

    The summary is attached as `extra={"context": ...}`, which
    `logging_config.JSONFormatter` renders as a `context` object.
    """

    def __init__(self, logger: logging.Logger | None = None, *, level: int = logging.DEBUG) -> None:
        self._logger = logger or logging.getLogger("detector.events")
        self._level = level

    def __call__(self, event: Event) -> None:
        if not self._logger.isEnabledFor(self._level):
            return
        context = {
            "type": event.type,
            "accessor": event.accessor,
            "prop": None if event.prop is None else repr(event.prop),
            "is_deferred": event.is_deferred,
            "timestamp": event.timestamp.isoformat(),
        }
        if event.error is not None:
            context["error"] = repr(event.error)
        self._logger.log(self._level, "%s %s", event.type, event.accessor, extra={"context": context})
