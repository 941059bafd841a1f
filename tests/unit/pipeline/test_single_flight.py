"""Tests for single-flight request coalescing."""

import asyncio

import pytest

from ai_gateway.pipeline.single_flight import SingleFlight, SingleFlightStats


class GatedOperation:
    """Operation that blocks until released and counts executions."""

    def __init__(self, result="done", error: Exception = None):
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0
        self.cancelled = False
        self._result = result
        self._error = error

    async def __call__(self):
        self.calls += 1
        self.started.set()
        try:
            await self.release.wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self._error is not None:
            raise self._error
        return self._result


async def settle(rounds: int = 5) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


class TestSingleFlightStats:
    """Test coalescing statistics."""

    def test_rate_without_calls(self):
        assert SingleFlightStats().coalesce_rate == 0.0

    def test_rate(self):
        assert SingleFlightStats(total_calls=4, coalesced=3, executed=1).coalesce_rate == 0.75


class TestSingleFlight:
    """Test single-flight execution."""

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_execution(self):
        flight = SingleFlight()
        operation = GatedOperation()

        callers = [asyncio.ensure_future(flight.do("k", operation)) for _ in range(5)]
        await operation.started.wait()
        operation.release.set()
        results = await asyncio.gather(*callers)

        assert results == ["done"] * 5
        assert operation.calls == 1
        assert flight.stats.executed == 1
        assert flight.stats.coalesced == 4
        assert flight.in_flight == 0

    @pytest.mark.asyncio
    async def test_different_keys_run_separately(self):
        flight = SingleFlight()

        async def echo_a():
            return "a"

        async def echo_b():
            return "b"

        results = await asyncio.gather(flight.do("a", echo_a), flight.do("b", echo_b))

        assert results == ["a", "b"]
        assert flight.stats.executed == 2

    @pytest.mark.asyncio
    async def test_finished_call_is_not_reused(self):
        flight = SingleFlight()
        calls = []

        async def operation():
            calls.append(1)
            return len(calls)

        assert await flight.do("k", operation) == 1
        await settle()
        assert await flight.do("k", operation) == 2

    @pytest.mark.asyncio
    async def test_error_is_shared_by_all_callers(self):
        flight = SingleFlight()
        operation = GatedOperation(error=RuntimeError("upstream down"))

        callers = [asyncio.ensure_future(flight.do("k", operation)) for _ in range(3)]
        await operation.started.wait()
        operation.release.set()
        results = await asyncio.gather(*callers, return_exceptions=True)

        assert all(isinstance(r, RuntimeError) for r in results)
        assert operation.calls == 1
        await settle()
        assert flight.in_flight == 0

    @pytest.mark.asyncio
    async def test_cancelled_waiter_does_not_cancel_others(self):
        """One client disconnecting leaves the shared call running."""
        flight = SingleFlight()
        operation = GatedOperation()

        first = asyncio.ensure_future(flight.do("k", operation))
        second = asyncio.ensure_future(flight.do("k", operation))
        await operation.started.wait()

        first.cancel()
        with pytest.raises(asyncio.CancelledError):
            await first

        operation.release.set()
        assert await second == "done"
        assert operation.cancelled is False

    @pytest.mark.asyncio
    async def test_last_waiter_cancelled_cancels_call(self):
        flight = SingleFlight()
        operation = GatedOperation()

        caller = asyncio.ensure_future(flight.do("k", operation))
        await operation.started.wait()

        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller
        await settle()

        assert operation.cancelled is True
        assert flight.in_flight == 0
