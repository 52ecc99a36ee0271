from __future__ import annotations

import asyncio
import concurrent.futures
from types import SimpleNamespace

import pytest

from detector import InMemoryEventCollector, instrument, is_deferred


async def _settled(collector: InMemoryEventCollector, count: int = 1) -> None:
    """Let pending done-callbacks run (they are scheduled on a later loop turn)."""
    for _ in range(10):
        if len(collector.of_type("apply:resolved", "apply:rejected")) >= count:
            return
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_coroutine_resolution_is_reported(collector: InMemoryEventCollector) -> None:
    async def answer() -> int:
        await asyncio.sleep(0)
        return 42

    api = instrument(SimpleNamespace(answer=answer), collector)

    assert await api.answer() == 42

    applies = collector.of_type("apply")
    resolved = collector.of_type("apply:resolved")
    assert len(applies) == 1
    assert applies[0].is_deferred is True
    assert asyncio.iscoroutine(applies[0].result)
    assert len(resolved) == 1
    assert resolved[0].result == 42
    assert resolved[0].is_deferred is True
    assert resolved[0].accessor == "answer"
    assert collector.of_type("apply:rejected") == []

    types = [e.type for e in collector.snapshot()]
    assert types.index("apply") < types.index("apply:resolved")


@pytest.mark.asyncio
async def test_coroutine_rejection_is_reported_and_reraised(collector: InMemoryEventCollector) -> None:
    err = ValueError("boom")

    async def fail() -> None:
        raise err

    w = instrument(fail, collector)

    with pytest.raises(ValueError) as excinfo:
        await w()

    assert excinfo.value is err
    (rejected,) = collector.of_type("apply:rejected")
    assert rejected.error is err
    assert rejected.is_deferred is True
    assert collector.of_type("apply:resolved") == []


@pytest.mark.asyncio
async def test_future_is_returned_unchanged_and_tracked(collector: InMemoryEventCollector) -> None:
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[int] = loop.create_future()

    w = instrument(lambda: fut, collector)
    returned = w()

    assert returned is fut
    assert collector.of_type("apply:resolved") == []

    fut.set_result(42)
    assert await returned == 42
    await _settled(collector)

    (resolved,) = collector.of_type("apply:resolved")
    assert resolved.result == 42


@pytest.mark.asyncio
async def test_future_rejection_reaches_consumer_and_observer(collector: InMemoryEventCollector) -> None:
    loop = asyncio.get_running_loop()
    fut: asyncio.Future[int] = loop.create_future()
    w = instrument(lambda: fut, collector)

    returned = w()
    fut.set_exception(RuntimeError("boom"))

    with pytest.raises(RuntimeError, match="boom"):
        await returned
    await _settled(collector)

    (rejected,) = collector.of_type("apply:rejected")
    assert str(rejected.error) == "boom"


@pytest.mark.asyncio
async def test_cancelled_task_is_reported_as_rejected(collector: InMemoryEventCollector) -> None:
    async def forever() -> None:
        await asyncio.sleep(3600)

    w = instrument(lambda: asyncio.ensure_future(forever()), collector)
    task = w()
    await asyncio.sleep(0)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task
    await _settled(collector)

    (rejected,) = collector.of_type("apply:rejected")
    assert isinstance(rejected.error, asyncio.CancelledError)


def test_concurrent_future_is_tracked(collector: InMemoryEventCollector) -> None:
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        submit = instrument(pool.submit, collector)
        fut = submit(lambda: 7)
        assert fut.result(timeout=5) == 7

    (resolved,) = collector.of_type("apply:resolved")
    assert resolved.result == 7


@pytest.mark.asyncio
async def test_throwing_observer_does_not_affect_awaited_result() -> None:
    def broken(event: object) -> None:
        raise RuntimeError("observer bug")

    async def answer() -> int:
        return 42

    w = instrument(answer, broken)

    assert await w() == 42


@pytest.mark.asyncio
async def test_deferred_values_read_from_attributes_are_not_wrapped(collector: InMemoryEventCollector) -> None:
    fut: asyncio.Future[str] = asyncio.get_running_loop().create_future()
    w = instrument(SimpleNamespace(pending=fut), collector)

    assert w.pending is fut
    (event,) = collector.of_type("get")
    assert event.is_deferred is True
    fut.cancel()


def test_is_deferred() -> None:
    async def coro() -> None:
        return None

    c = coro()
    try:
        assert is_deferred(c) is True
    finally:
        c.close()
    assert is_deferred(concurrent.futures.Future()) is True
    assert is_deferred({"a": 1}) is False
    assert is_deferred(42) is False


class _PendingRequest:
    """Awaitable that also works as an async context manager."""

    def __init__(self) -> None:
        self.closed = False

    def __await__(self):
        return self._send().__await__()

    async def _send(self) -> str:
        return "response"

    async def __aenter__(self) -> str:
        return await self._send()

    async def __aexit__(self, *exc_info: object) -> bool:
        self.closed = True
        return False


@pytest.mark.asyncio
async def test_other_awaitables_are_returned_unchanged(collector: InMemoryEventCollector) -> None:
    request = _PendingRequest()
    client = instrument(SimpleNamespace(get=lambda: request), collector)

    returned = client.get()
    assert returned is request

    async with returned as response:
        assert response == "response"
    assert request.closed
    assert await client.get() == "response"

    applies = collector.of_type("apply")
    assert len(applies) == 2
    assert all(e.is_deferred and e.result is request for e in applies)
    assert collector.of_type("apply:resolved", "apply:rejected") == []


class _DuckFuture:
    """Minimal asyncio-compatible future recognised by `asyncio.isfuture`."""

    _asyncio_future_blocking = False

    def __init__(self) -> None:
        self._callbacks: list = []
        self._result: object = None

    def add_done_callback(self, fn) -> None:
        self._callbacks.append(fn)

    def set_result(self, result: object) -> None:
        self._result = result
        for fn in self._callbacks:
            fn(self)

    def cancelled(self) -> bool:
        return False

    def exception(self) -> None:
        return None

    def result(self) -> object:
        return self._result

    def __await__(self):
        yield from ()
        return self._result


def test_duck_typed_futures_get_a_done_callback(collector: InMemoryEventCollector) -> None:
    fut = _DuckFuture()
    w = instrument(lambda: fut, collector)

    assert w() is fut
    assert is_deferred(fut)
    fut.set_result("done")

    (resolved,) = collector.of_type("apply:resolved")
    assert resolved.result == "done"
