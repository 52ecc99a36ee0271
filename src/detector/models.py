"""Event records emitted by the interception layer.

Events are:
- Immutable and short-lived (handed to the observer, then discarded).
- Built only after the accessor passed filtering.
- Free of wrappers: `result` and `value` always hold the raw originals.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

from .paths import render


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(tz=timezone.utc)


EventType = Literal[
    "get",
    "set",
    "apply",
    "apply:resolved",
    "apply:rejected",
    "construct",
    "deleteProperty",
]

GET: Final = "get"
SET: Final = "set"
APPLY: Final = "apply"
APPLY_RESOLVED: Final = "apply:resolved"
APPLY_REJECTED: Final = "apply:rejected"
CONSTRUCT: Final = "construct"
DELETE_PROPERTY: Final = "deleteProperty"


class Event(BaseModel):
    """One observed structural operation on an instrumented value."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    type: EventType
    timestamp: datetime = Field(default_factory=utc_now)

    # The unwrapped object the operation executed against.
    target: Any = None

    # Route from the instrumentation root; `accessor` renders it on demand.
    path: tuple[Any, ...] = ()

    # Key involved in get/set/deleteProperty.
    prop: Any = None

    # Call arguments for apply/construct and their settlement events.
    args: tuple[Any, ...] | None = None
    kwargs: dict[str, Any] | None = None

    # Value being written (set only).
    value: Any = None

    # Value produced by a read, call, construction or resolution.
    result: Any = None
    is_deferred: bool = False

    # Exception raised by the underlying operation, or a rejection reason.
    error: Any = None

    @property
    def accessor(self) -> str:
        """Accessor string for `path`, e.g. `user.addresses[0].city`."""
        return render(self.path)

    @property
    def failed(self) -> bool:
        return self.error is not None
