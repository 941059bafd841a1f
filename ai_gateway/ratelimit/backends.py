"""
Counter backends for fixed-window rate limiting.

Sandi Metz Principles:
- Single Responsibility: Atomic counting only
- Small classes: One backend per store
- Dependency Injection: Repository / clock injected
"""

import asyncio
import time
from typing import Dict, Protocol, Tuple

from ai_gateway.repositories.redis_repository import RedisRepository


class CounterBackend(Protocol):
    """Store supporting atomic increment with expiry."""

    async def increment(self, key: str, ttl_seconds: int) -> int:
        """Increment counter and return the post-increment value."""
        ...


class RedisCounterBackend:
    """Counter backend using Redis INCR + EXPIRE in one transaction."""

    def __init__(self, repository: RedisRepository):
        """
        Initialize backend.

        Args:
            repository: Redis repository
        """
        self._repository = repository

    async def increment(self, key: str, ttl_seconds: int) -> int:
        """
        Increment counter.

        Args:
            key: Counter key
            ttl_seconds: Counter expiry

        Returns:
            Post-increment count

        Raises:
            RateLimiterUnavailableError: If Redis cannot be reached
        """
        return await self._repository.increment(key, ttl_seconds)


class InMemoryCounterBackend:
    """
    Process-local counter backend.

    Increments are serialized by one asyncio lock so concurrent
    increment-then-compare steps never lose updates.
    """

    def __init__(self, clock=time.monotonic):
        """
        Initialize backend.

        Args:
            clock: Monotonic time source for expiry
        """
        self._clock = clock
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    async def increment(self, key: str, ttl_seconds: int) -> int:
        """
        Increment counter.

        Args:
            key: Counter key
            ttl_seconds: Counter expiry

        Returns:
            Post-increment count
        """
        async with self._lock:
            now = self._clock()
            self._purge_expired(now)
            count, _ = self._counters.get(key, (0, 0.0))
            count += 1
            self._counters[key] = (count, now + ttl_seconds)
            return count

    def _purge_expired(self, now: float) -> None:
        """Drop counters whose window is over."""
        expired = [k for k, (_, exp) in self._counters.items() if exp <= now]
        for key in expired:
            del self._counters[key]

    @property
    def active_counters(self) -> int:
        """Number of live counters."""
        return len(self._counters)
