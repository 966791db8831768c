"""Tests for asyncio request coalescing."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from swapcache.cache.coalescer import Coalescer


class QuoteUnavailable(Exception):
    pass


def _gated_producer(gate: asyncio.Event, value=None, error=None):
    calls = []

    async def producer():
        calls.append(1)
        await gate.wait()
        if error is not None:
            raise error
        return value

    return producer, calls


class TestCoalescer:
    async def test_single_call(self):
        coalescer = Coalescer()
        producer = AsyncMock(return_value=42)
        assert await coalescer.run("k", producer) == 42
        producer.assert_awaited_once()

    async def test_concurrent_calls_share_one_producer(self):
        coalescer = Coalescer()
        gate = asyncio.Event()
        producer, calls = _gated_producer(gate, value={"amountOut": "997"})

        tasks = [asyncio.create_task(coalescer.run("k", producer)) for _ in range(10)]
        await asyncio.sleep(0)
        assert coalescer.active_requests == 1
        gate.set()
        results = await asyncio.gather(*tasks)

        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    async def test_different_keys_run_independently(self):
        coalescer = Coalescer()
        a = AsyncMock(return_value="a")
        b = AsyncMock(return_value="b")
        results = await asyncio.gather(coalescer.run("ka", a), coalescer.run("kb", b))
        assert results == ["a", "b"]
        a.assert_awaited_once()
        b.assert_awaited_once()

    async def test_failure_reaches_every_waiter(self):
        coalescer = Coalescer()
        gate = asyncio.Event()
        error = QuoteUnavailable("rpc down")
        producer, calls = _gated_producer(gate, error=error)

        tasks = [asyncio.create_task(coalescer.run("k", producer)) for _ in range(5)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert len(calls) == 1
        assert all(r is error for r in results)

    async def test_failure_is_not_memoized(self):
        coalescer = Coalescer()
        failing = AsyncMock(side_effect=QuoteUnavailable("rpc down"))
        with pytest.raises(QuoteUnavailable):
            await coalescer.run("k", failing)

        retry = AsyncMock(return_value="fresh")
        assert await coalescer.run("k", retry) == "fresh"
        retry.assert_awaited_once()

    async def test_registration_removed_after_settle(self):
        coalescer = Coalescer()
        await coalescer.run("k", AsyncMock(return_value=1))
        assert not coalescer.in_flight("k")
        assert coalescer.active_requests == 0

    async def test_sequential_calls_start_fresh(self):
        coalescer = Coalescer()
        producer = AsyncMock(side_effect=[1, 2])
        assert await coalescer.run("k", producer) == 1
        assert await coalescer.run("k", producer) == 2
        assert producer.await_count == 2

    async def test_second_producer_ignored_while_in_flight(self):
        coalescer = Coalescer()
        gate = asyncio.Event()
        first, first_calls = _gated_producer(gate, value="first")
        second = AsyncMock(return_value="second")

        t1 = asyncio.create_task(coalescer.run("k", first))
        await asyncio.sleep(0)
        t2 = asyncio.create_task(coalescer.run("k", second))
        await asyncio.sleep(0)
        gate.set()

        assert await asyncio.gather(t1, t2) == ["first", "first"]
        second.assert_not_awaited()

    async def test_cancelled_waiter_does_not_cancel_shared_operation(self):
        coalescer = Coalescer()
        gate = asyncio.Event()
        producer, calls = _gated_producer(gate, value="done")

        impatient = asyncio.create_task(coalescer.run("k", producer))
        patient = asyncio.create_task(coalescer.run("k", producer))
        await asyncio.sleep(0)
        impatient.cancel()
        await asyncio.sleep(0)
        gate.set()

        assert await patient == "done"
        assert impatient.cancelled()
        assert len(calls) == 1

    async def test_stats(self):
        coalescer = Coalescer()
        gate = asyncio.Event()
        producer, _ = _gated_producer(gate, value=1)

        tasks = [asyncio.create_task(coalescer.run("k", producer)) for _ in range(3)]
        await asyncio.sleep(0)
        stats = coalescer.stats()
        assert stats["active_keys"] == ["k"]
        assert stats["started"] == 1
        assert stats["joined"] == 2
        gate.set()
        await asyncio.gather(*tasks)
        assert coalescer.stats()["active_requests"] == 0
