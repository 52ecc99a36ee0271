"""Single choke point between the traps and the caller's observer."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from .filters import PathFilter
from .models import Event, EventType, utc_now
from .paths import render

logger = logging.getLogger(__name__)

Observer = Callable[[Event], Any]


class EventEmitter:
    """Filters events by accessor and forwards the survivors to the observer.

    Observer failures are logged and counted, never propagated: the operation
    being observed must behave exactly as if nobody was watching.
    """

    def __init__(self, observer: Observer, *, path_filter: PathFilter | None = None) -> None:
        self._observer = observer
        self._filter = path_filter or PathFilter()

        # Degradation tracking: counts and time window of observer failures.
        self._observer_failures = 0
        self._first_failure_at: datetime | None = None
        self._last_failure_at: datetime | None = None

    @property
    def path_filter(self) -> PathFilter:
        return self._filter

    def emit(self, event_type: EventType, path: tuple[Any, ...], **fields: Any) -> Event | None:
        """Build and deliver an event unless its accessor is filtered out.

        Returns the delivered event, or None when it was filtered.
        """
        accessor = render(path)
        if not self._filter(accessor):
            return None

        event = Event(type=event_type, path=path, **fields)
        try:
            self._observer(event)
        except Exception:  # noqa: BLE001 - observer must not break the observed program
            now = utc_now()
            self._observer_failures += 1
            self._first_failure_at = self._first_failure_at or now
            self._last_failure_at = now
            logger.warning("Observer failed handling %s event at %r", event_type, accessor, exc_info=True)
        return event

    def degraded_status(self) -> dict[str, Any]:
        """Return a minimal degraded-status snapshot."""
        return {
            "observer_failures": self._observer_failures,
            "first_failure_at": self._first_failure_at,
            "last_failure_at": self._last_failure_at,
        }
