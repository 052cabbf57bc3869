"""Tests for single-flight request collapsing."""
import asyncio

import pytest
from ngaweb.errors import HTTPStatusError
from ngaweb.parse.models import RequestKey, ThreadPage
from ngaweb.store.inflight import InflightRegistry

KEY = RequestKey("1", 1)


def test_concurrent_calls_collapse_into_one():
    """Test N concurrent joins run compute once and share its result."""
    calls = []

    async def compute() -> ThreadPage:
        calls.append(1)
        await asyncio.sleep(0.01)
        return ThreadPage(tid="1", page=1)

    async def scenario():
        registry = InflightRegistry()
        results = await asyncio.gather(*(registry.run(KEY, compute) for _ in range(10)))
        return registry, results

    registry, results = asyncio.run(scenario())

    assert len(calls) == 1
    assert all(r is results[0] for r in results)
    assert len(registry) == 0


def test_concurrent_failure_shared():
    """Test every joiner sees the single failure."""
    calls = []
    error = HTTPStatusError(503)

    async def compute() -> ThreadPage:
        calls.append(1)
        await asyncio.sleep(0.01)
        raise error

    async def scenario():
        registry = InflightRegistry()
        return await asyncio.gather(
            *(registry.run(KEY, compute) for _ in range(5)),
            return_exceptions=True,
        )

    results = asyncio.run(scenario())

    assert len(calls) == 1
    assert all(r is error for r in results)


def test_key_released_after_success():
    """Test a settled key runs the next compute."""
    calls = []

    def make(tag: str):
        async def compute() -> ThreadPage:
            calls.append(tag)
            return ThreadPage(tid="1", page=1)
        return compute

    async def scenario():
        registry = InflightRegistry()
        first = await registry.run(KEY, make("first"))
        second = await registry.run(KEY, make("second"))
        return first, second

    first, second = asyncio.run(scenario())

    assert calls == ["first", "second"]
    assert first is not second


def test_key_released_after_failure():
    """Test a failed computation does not poison the key."""
    calls = []

    async def failing() -> ThreadPage:
        calls.append("failing")
        raise RuntimeError("boom")

    async def working() -> ThreadPage:
        calls.append("working")
        return ThreadPage(tid="1", page=1)

    async def scenario():
        registry = InflightRegistry()
        with pytest.raises(RuntimeError):
            await registry.run(KEY, failing)
        assert KEY not in registry
        return await registry.run(KEY, working)

    page = asyncio.run(scenario())

    assert calls == ["failing", "working"]
    assert page.tid == "1"


def test_distinct_keys_run_independently():
    """Test different keys each get their own computation."""
    calls = []

    def make(page: int):
        async def compute() -> ThreadPage:
            calls.append(page)
            await asyncio.sleep(0.01)
            return ThreadPage(tid="1", page=page)
        return compute

    async def scenario():
        registry = InflightRegistry()
        return await asyncio.gather(
            registry.run(RequestKey("1", 1), make(1)),
            registry.run(RequestKey("1", 2), make(2)),
        )

    results = asyncio.run(scenario())

    assert sorted(calls) == [1, 2]
    assert [r.page for r in results] == [1, 2]


def test_cancelled_follower_does_not_cancel_computation():
    """Test cancelling one joiner leaves the others and the computation alone."""
    started = []

    async def scenario():
        gate = asyncio.Event()
        registry = InflightRegistry()

        async def compute() -> ThreadPage:
            started.append(1)
            await gate.wait()
            return ThreadPage(tid="1", page=1)

        leader = asyncio.create_task(registry.run(KEY, compute))
        follower = asyncio.create_task(registry.run(KEY, compute))
        await asyncio.sleep(0)
        await asyncio.sleep(0)

        follower.cancel()
        await asyncio.sleep(0)
        gate.set()

        page = await leader
        with pytest.raises(asyncio.CancelledError):
            await follower
        return page

    page = asyncio.run(scenario())

    assert len(started) == 1
    assert page.page == 1


def test_cancelled_leader_does_not_cancel_computation():
    """Test cancelling the caller that started the computation."""

    async def scenario():
        gate = asyncio.Event()
        registry = InflightRegistry()

        async def compute() -> ThreadPage:
            await gate.wait()
            return ThreadPage(tid="1", page=1)

        leader = asyncio.create_task(registry.run(KEY, compute))
        await asyncio.sleep(0)
        follower = asyncio.create_task(registry.run(KEY, compute))
        await asyncio.sleep(0)

        leader.cancel()
        await asyncio.sleep(0)
        gate.set()

        return await follower

    page = asyncio.run(scenario())
    assert page.tid == "1"
