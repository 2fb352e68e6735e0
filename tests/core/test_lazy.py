"""Tests for AsyncLazy — single-flight async memoization."""

from __future__ import annotations

import asyncio

import pytest

from dockside.core.errors import CacheComputationError
from dockside.core.lazy import AsyncLazy, LazyState


class _Counter:
    def __init__(self, *, delay: float = 0.0, fail_times: int = 0):
        self.calls = 0
        self.delay = delay
        self.fail_times = fail_times

    async def __call__(self) -> int:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.calls <= self.fail_times:
            raise RuntimeError(f"boom {self.calls}")
        return self.calls


class TestGetValue:
    @pytest.mark.asyncio
    async def test_caches_value(self):
        producer = _Counter()
        lazy = AsyncLazy(producer)
        assert await lazy.get_value() == 1
        assert await lazy.get_value() == 1
        assert producer.calls == 1
        assert lazy.has_value

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_computation(self):
        producer = _Counter(delay=0.05)
        lazy = AsyncLazy(producer)

        results = await asyncio.gather(*[lazy.get_value() for _ in range(10)])

        assert producer.calls == 1
        assert results == [1] * 10
        assert lazy.computations == 1

    @pytest.mark.asyncio
    async def test_state_transitions(self):
        lazy = AsyncLazy(_Counter(delay=0.05))
        assert lazy.state is LazyState.EMPTY

        task = asyncio.ensure_future(lazy.get_value())
        await asyncio.sleep(0)
        assert lazy.state is LazyState.PENDING
        assert lazy.is_pending

        await task
        assert lazy.state is LazyState.RESOLVED


class TestFailure:
    @pytest.mark.asyncio
    async def test_failure_is_not_cached(self):
        producer = _Counter(fail_times=1)
        lazy = AsyncLazy(producer)

        with pytest.raises(CacheComputationError) as exc_info:
            await lazy.get_value()
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert lazy.state is LazyState.EMPTY

        assert await lazy.get_value() == 2
        assert producer.calls == 2

    @pytest.mark.asyncio
    async def test_all_concurrent_awaiters_see_failure(self):
        producer = _Counter(delay=0.02, fail_times=1)
        lazy = AsyncLazy(producer)

        results = await asyncio.gather(
            lazy.get_value(), lazy.get_value(), return_exceptions=True,
        )

        assert all(isinstance(r, CacheComputationError) for r in results)
        assert producer.calls == 1

    @pytest.mark.asyncio
    async def test_failure_error_is_retryable(self):
        lazy = AsyncLazy(_Counter(fail_times=1))
        with pytest.raises(CacheComputationError) as exc_info:
            await lazy.get_value()
        assert exc_info.value.retryable is True


class TestClear:
    @pytest.mark.asyncio
    async def test_clear_forces_fresh_computation(self):
        producer = _Counter()
        lazy = AsyncLazy(producer)
        assert await lazy.get_value() == 1

        lazy.clear()
        assert lazy.state is LazyState.EMPTY
        assert await lazy.get_value() == 2
        assert producer.calls == 2

    @pytest.mark.asyncio
    async def test_clear_during_flight_does_not_cancel(self):
        producer = _Counter(delay=0.05)
        lazy = AsyncLazy(producer)

        first = asyncio.ensure_future(lazy.get_value())
        await asyncio.sleep(0)
        lazy.clear()

        # in-flight awaiter still gets its result
        assert await first == 1
        # the next call starts over
        assert await lazy.get_value() == 2
        assert producer.calls == 2

    @pytest.mark.asyncio
    async def test_cancelled_awaiter_does_not_cancel_computation(self):
        producer = _Counter(delay=0.05)
        lazy = AsyncLazy(producer)

        first = asyncio.ensure_future(lazy.get_value())
        await asyncio.sleep(0)
        second = asyncio.ensure_future(lazy.get_value())
        await asyncio.sleep(0)
        first.cancel()

        assert await second == 1
        assert producer.calls == 1

    @pytest.mark.asyncio
    async def test_generation_advances_on_clear(self):
        lazy = AsyncLazy(_Counter(delay=0.05))
        assert lazy.generation == 0

        pending = asyncio.ensure_future(lazy.get_value())
        await asyncio.sleep(0)
        lazy.clear()

        assert lazy.generation == 1
        assert await pending == 1
        assert lazy.generation == 1
