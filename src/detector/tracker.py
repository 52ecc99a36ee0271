"""Settlement tracking for deferred call results.

Futures (asyncio, `concurrent.futures` and duck-typed asyncio-compatible ones)
get a done-callback and are handed back untouched. Coroutines have no callback
hook, so they are returned inside a tracking coroutine that awaits the original
and hands back the very same result or exception. Any other awaitable is
returned unchanged and untracked, since replacing it would drop whatever other
protocols it implements (an awaitable request that is also an async context
manager, for example).
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import inspect
from collections.abc import Awaitable
from typing import Any

from .emitter import EventEmitter
from .models import APPLY_REJECTED, APPLY_RESOLVED

_FUTURE_TYPES = (asyncio.Future, concurrent.futures.Future)


def _is_future(value: Any) -> bool:
    return isinstance(value, _FUTURE_TYPES) or asyncio.isfuture(value)


def is_deferred(value: Any) -> bool:
    """Return True for values whose outcome is only known later."""
    if _is_future(value):
        return True
    try:
        return inspect.isawaitable(value)
    except Exception:  # noqa: BLE001 - exotic __class__ implementations
        return False


class AsyncResultTracker:
    """Emits `apply:resolved` / `apply:rejected` once a deferred result settles."""

    def __init__(self, emitter: EventEmitter) -> None:
        self._emitter = emitter

    def track(self, deferred: Any, *, path: tuple[Any, ...], **fields: Any) -> Any:
        """Start observing `deferred`; return what the caller should receive.

        `fields` (target, args, kwargs) are copied onto the settlement event.
        Awaitables that are neither futures nor coroutines come back as-is and
        produce no settlement event.
        """
        if _is_future(deferred):
            deferred.add_done_callback(lambda fut: self._on_done(fut, path, fields))
            return deferred
        if inspect.iscoroutine(deferred):
            return self._observe(deferred, path, fields)
        return deferred

    def _on_done(
        self,
        fut: asyncio.Future[Any] | concurrent.futures.Future[Any],
        path: tuple[Any, ...],
        fields: dict[str, Any],
    ) -> None:
        if fut.cancelled():
            cancelled = asyncio.CancelledError if asyncio.isfuture(fut) else concurrent.futures.CancelledError
            self._reject(path, fields, cancelled())
            return
        exc = fut.exception()
        if exc is not None:
            self._reject(path, fields, exc)
        else:
            self._resolve(path, fields, fut.result())

    async def _observe(self, awaitable: Awaitable[Any], path: tuple[Any, ...], fields: dict[str, Any]) -> Any:
        try:
            result = await awaitable
        except (Exception, asyncio.CancelledError) as exc:
            self._reject(path, fields, exc)
            raise
        self._resolve(path, fields, result)
        return result

    def _resolve(self, path: tuple[Any, ...], fields: dict[str, Any], result: Any) -> None:
        self._emitter.emit(APPLY_RESOLVED, path, result=result, is_deferred=True, **fields)

    def _reject(self, path: tuple[Any, ...], fields: dict[str, Any], error: BaseException) -> None:
        self._emitter.emit(APPLY_REJECTED, path, error=error, is_deferred=True, **fields)
