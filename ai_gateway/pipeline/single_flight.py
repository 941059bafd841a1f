"""
Single-flight request coalescing.

Concurrent callers asking for the same key share one in-flight
computation instead of each paying for an upstream call.

Sandi Metz Principles:
- Single Responsibility: Coalesce concurrent work per key
- Async-safe: All bookkeeping happens on the event loop thread
- Memory-bounded: Entries live only while work is in flight
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict

from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class InFlightCall:
    """A computation currently running for one key."""

    task: asyncio.Task
    waiters: int = 0


@dataclass
class SingleFlightStats:
    """Statistics for coalescing."""

    total_calls: int = 0
    coalesced: int = 0
    executed: int = 0

    @property
    def coalesce_rate(self) -> float:
        """Get coalescing rate."""
        if self.total_calls == 0:
            return 0.0
        return self.coalesced / self.total_calls


class SingleFlight:
    """
    One in-flight computation per key.

    The computation runs as its own task. It is cancelled only when
    every caller waiting on it has been cancelled, so one client
    disconnecting does not fail the others.
    """

    def __init__(self):
        self._calls: Dict[str, InFlightCall] = {}
        self._stats = SingleFlightStats()

    async def do(self, key: str, operation: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run operation for key, or join the call already in flight.

        Args:
            key: Coalescing key
            operation: Async function producing the result

        Returns:
            Operation result (shared between coalesced callers)
        """
        self._stats.total_calls += 1
        call = self._calls.get(key)

        if call is None:
            self._stats.executed += 1
            call = InFlightCall(task=asyncio.ensure_future(operation()))
            self._calls[key] = call
            call.task.add_done_callback(lambda _: self._forget(key, call))
        else:
            self._stats.coalesced += 1
            logger.debug("Request coalesced", key=key)

        call.waiters += 1
        try:
            return await asyncio.shield(call.task)
        except asyncio.CancelledError:
            self._abandon(key, call)
            raise
        finally:
            call.waiters -= 1

    def _abandon(self, key: str, call: InFlightCall) -> None:
        """Cancel the shared task once its last waiter has gone."""
        if call.waiters <= 1 and not call.task.done():
            logger.debug("Cancelling abandoned in-flight call", key=key)
            call.task.cancel()

    def _forget(self, key: str, call: InFlightCall) -> None:
        if self._calls.get(key) is call:
            del self._calls[key]

    @property
    def in_flight(self) -> int:
        """Number of keys currently being computed."""
        return len(self._calls)

    @property
    def stats(self) -> SingleFlightStats:
        """Get coalescing statistics."""
        return self._stats
