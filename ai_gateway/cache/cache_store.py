"""
Cache store services.

Sandi Metz Principles:
- Single Responsibility: Cache operations with graceful degradation
- Small methods: Each operation < 10 lines
- Dependency Injection: Repository injected

A cache store never fails a request: read errors are misses and write
errors are logged.
"""

import time
from collections import OrderedDict
from typing import Dict, Optional, Protocol, Tuple

from ai_gateway.exceptions import CacheUnavailableError
from ai_gateway.models.cache_entry import CacheEntry
from ai_gateway.repositories.redis_repository import RedisRepository
from ai_gateway.utils.hasher import storage_key
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class CacheStore(Protocol):
    """Content-addressed store with per-entry expiry."""

    async def get(self, key: str) -> Optional[CacheEntry]:
        ...

    async def set(self, entry: CacheEntry) -> bool:
        ...

    async def delete(self, key: str) -> bool:
        ...

    async def health_check(self) -> bool:
        ...


class RedisCacheStore:
    """
    Redis-backed cache store.

    Provides high-level cache operations.
    """

    def __init__(self, repository: RedisRepository):
        """
        Initialize cache store.

        Args:
            repository: Redis repository
        """
        self._repository = repository

    async def get(self, key: str) -> Optional[CacheEntry]:
        """
        Get cached entry.

        Args:
            key: Cache key

        Returns:
            Cache entry if found, None on miss or backend failure
        """
        try:
            return await self._repository.fetch(storage_key(key))
        except CacheUnavailableError as e:
            logger.warning("Cache unavailable, treating as miss", key=key, error=str(e))
            return None

    async def set(self, entry: CacheEntry) -> bool:
        """
        Store cache entry.

        Args:
            entry: Cache entry to store

        Returns:
            True if stored successfully
        """
        try:
            await self._repository.store(
                storage_key(entry.key), entry, entry.ttl_seconds
            )
        except CacheUnavailableError as e:
            logger.error("Cache store failed", key=entry.key, error=str(e))
            return False

        logger.info("Cache stored", key=entry.key, ttl=entry.ttl_seconds)
        return True

    async def delete(self, key: str) -> bool:
        """
        Delete cache entry.

        Args:
            key: Cache key

        Returns:
            True if deleted successfully
        """
        try:
            return await self._repository.delete(storage_key(key))
        except CacheUnavailableError as e:
            logger.error("Cache delete failed", key=key, error=str(e))
            return False

    async def health_check(self) -> bool:
        """
        Check Redis health.

        Returns:
            True if healthy, False otherwise
        """
        return await self._repository.ping()


class InMemoryCacheStore:
    """
    Process-local cache store.

    Used when Redis is disabled. Expiry is checked lazily on read and
    the least recently used entry is evicted at capacity.
    """

    def __init__(self, max_entries: int = 1024, clock=time.monotonic):
        """
        Initialize in-memory store.

        Args:
            max_entries: Capacity before LRU eviction
            clock: Monotonic time source
        """
        self._max_entries = max_entries
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, CacheEntry]]" = OrderedDict()

    async def get(self, key: str) -> Optional[CacheEntry]:
        """
        Get cached entry.

        Args:
            key: Cache key

        Returns:
            Cache entry if present and unexpired
        """
        item = self._entries.get(key)
        if item is None:
            return None

        expires_at, entry = item
        if self._clock() >= expires_at:
            del self._entries[key]
            return None

        self._entries.move_to_end(key)
        return entry

    async def set(self, entry: CacheEntry) -> bool:
        """
        Store cache entry.

        Args:
            entry: Cache entry

        Returns:
            Always True
        """
        self._entries[entry.key] = (self._clock() + entry.ttl_seconds, entry)
        self._entries.move_to_end(entry.key)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
        return True

    async def delete(self, key: str) -> bool:
        """
        Delete cache entry.

        Args:
            key: Cache key

        Returns:
            True if an entry was removed
        """
        return self._entries.pop(key, None) is not None

    async def health_check(self) -> bool:
        """In-memory store is always available."""
        return True

    def snapshot(self) -> Dict[str, CacheEntry]:
        """
        Copy of live entries keyed by cache key.

        Returns:
            Mapping of key to entry
        """
        now = self._clock()
        return {k: e for k, (exp, e) in self._entries.items() if now < exp}

    def __len__(self) -> int:
        return len(self._entries)
