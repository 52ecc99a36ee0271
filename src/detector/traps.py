"""Trap handlers bound to one access path.

Each trap performs the real operation on the original value, reports it to the
session's emitter and, where the operation produces a value, recurses into it
through the session's registry. Exceptions raised by the original operation
are reported and then re-raised untouched.
"""

from __future__ import annotations

import inspect
import operator
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from .models import APPLY, CONSTRUCT, DELETE_PROPERTY, GET, SET, EventType
from .paths import CONSTRUCTED, SYNC_RESULT, Path
from .tracker import is_deferred
from .wrapper import unwrap

if TYPE_CHECKING:
    from .session import InstrumentSession


def is_reserved_key(key: Any) -> bool:
    """Dunder names belong to Python's own protocols and are never wrapped."""
    return isinstance(key, str) and len(key) > 4 and key.startswith("__") and key.endswith("__")


class Traps:
    """The get/set/call/construct/delete handlers for one `(path, depth)`."""

    __slots__ = ("_session", "_path", "_depth")

    def __init__(self, session: InstrumentSession, path: Path, depth: int) -> None:
        self._session = session
        self._path = path
        self._depth = depth

    @property
    def session(self) -> InstrumentSession:
        return self._session

    @property
    def path(self) -> Path:
        return self._path

    @property
    def depth(self) -> int:
        return self._depth

    def get_attr(self, target: Any, name: str) -> Any:
        return self._get(target, name, getattr, reserved=is_reserved_key(name))

    def get_item(self, target: Any, key: Any) -> Any:
        return self._get(target, key, operator.getitem, reserved=False)

    def set_attr(self, target: Any, name: str, value: Any) -> None:
        self._set(target, name, value, setattr)

    def set_item(self, target: Any, key: Any, value: Any) -> None:
        self._set(target, key, value, operator.setitem)

    def delete_attr(self, target: Any, name: str) -> None:
        self._delete(target, name, delattr)

    def delete_item(self, target: Any, key: Any) -> None:
        self._delete(target, key, operator.delitem)

    def call(self, target: Any, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Any:
        """Handle `wrapper(...)`: classes are constructed, everything else applied."""
        fields = {"target": target, "args": args, "kwargs": kwargs}

        if inspect.isclass(target):
            instance = self._perform(CONSTRUCT, self._path, lambda: target(*args, **kwargs), **fields)
            return self._session.wrap(instance, self._path.child(CONSTRUCTED), self._depth + 1)

        result = self._perform(APPLY, self._path, lambda: target(*args, **kwargs), **fields)
        if is_deferred(result):
            return self._session.tracker.track(result, path=self._path, **fields)
        return self._session.wrap(result, self._path.child(SYNC_RESULT), self._depth + 1)

    def _get(self, target: Any, key: Any, read: Callable[[Any, Any], Any], *, reserved: bool) -> Any:
        path = self._path.child(key)

        if reserved:
            value = read(target, key)
            self._session.emitter.emit(GET, path, target=target, prop=key, result=unwrap(value))
            return value

        value = self._perform(GET, path, lambda: read(target, key), target=target, prop=key)
        if is_deferred(value):
            return value
        return self._session.wrap(value, path, self._depth + 1)

    def _set(self, target: Any, key: Any, value: Any, write: Callable[[Any, Any, Any], None]) -> None:
        # Reported whether or not the write succeeds; a failed write still raises.
        try:
            write(target, key, value)
        finally:
            self._session.emitter.emit(SET, self._path.child(key), target=target, prop=key, value=unwrap(value))

    def _delete(self, target: Any, key: Any, remove: Callable[[Any, Any], None]) -> None:
        self._session.emitter.emit(DELETE_PROPERTY, self._path.child(key), target=target, prop=key)
        remove(target, key)

    def _perform(self, event_type: EventType, path: Path, operation: Callable[[], Any], **fields: Any) -> Any:
        try:
            result = operation()
        except Exception as exc:
            self._session.emitter.emit(event_type, path, error=exc, **fields)
            raise
        self._session.emitter.emit(
            event_type, path, result=unwrap(result), is_deferred=is_deferred(result), **fields
        )
        return result
