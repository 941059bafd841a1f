"""
Redis repository for data access.

Sandi Metz Principles:
- Single Responsibility: Redis data access
- Small methods: Each operation isolated
- Dependency Injection: Redis pool injected

Transport failures are re-raised as CacheUnavailableError or
RateLimiterUnavailableError so the owning component can apply its own
degradation policy.
"""

import json
from typing import Optional

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from ai_gateway.config import GatewayConfig
from ai_gateway.exceptions import CacheUnavailableError, RateLimiterUnavailableError
from ai_gateway.models.cache_entry import CacheEntry
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)


def create_redis_pool(settings: GatewayConfig) -> ConnectionPool:
    """
    Create Redis connection pool.

    Args:
        settings: Gateway configuration

    Returns:
        Redis connection pool
    """
    return ConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
        decode_responses=True,
    )


class RedisRepository:
    """
    Repository for Redis operations.

    Handles low-level Redis interactions.
    """

    def __init__(self, pool: ConnectionPool):
        """
        Initialize repository.

        Args:
            pool: Redis connection pool
        """
        self._pool = pool

    async def fetch(self, key: str) -> Optional[CacheEntry]:
        """
        Fetch cache entry by key.

        Args:
            key: Storage key

        Returns:
            Cache entry if found, None otherwise

        Raises:
            CacheUnavailableError: If Redis cannot be reached
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                data = await client.get(key)
        except RedisError as e:
            raise CacheUnavailableError(f"Redis fetch failed: {e}") from e

        if not data:
            return None

        try:
            return CacheEntry(**json.loads(data))
        except (ValueError, TypeError) as e:
            logger.warning("Discarding corrupt cache entry", key=key, error=str(e))
            return None

    async def store(self, key: str, entry: CacheEntry, ttl_seconds: int) -> None:
        """
        Store cache entry with expiry.

        Args:
            key: Storage key
            entry: Cache entry to store
            ttl_seconds: Time-to-live in seconds

        Raises:
            CacheUnavailableError: If Redis cannot be reached
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                await client.set(key, entry.model_dump_json(), ex=ttl_seconds)
        except RedisError as e:
            raise CacheUnavailableError(f"Redis store failed: {e}") from e

    async def delete(self, key: str) -> bool:
        """
        Delete cache entry.

        Args:
            key: Storage key

        Returns:
            True if deleted, False otherwise

        Raises:
            CacheUnavailableError: If Redis cannot be reached
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                result = await client.delete(key)
                return result > 0
        except RedisError as e:
            raise CacheUnavailableError(f"Redis delete failed: {e}") from e

    async def increment(self, key: str, ttl_seconds: int) -> int:
        """
        Atomically increment a counter and refresh its expiry.

        Args:
            key: Counter key
            ttl_seconds: Counter expiry in seconds

        Returns:
            Post-increment count

        Raises:
            RateLimiterUnavailableError: If Redis cannot be reached
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                async with client.pipeline(transaction=True) as pipe:
                    pipe.incr(key)
                    pipe.expire(key, ttl_seconds)
                    count, _ = await pipe.execute()
                    return int(count)
        except RedisError as e:
            raise RateLimiterUnavailableError(f"Redis increment failed: {e}") from e

    async def ping(self) -> bool:
        """
        Ping Redis server.

        Returns:
            True if connected, False otherwise
        """
        try:
            async with Redis(connection_pool=self._pool) as client:
                await client.ping()
                return True
        except RedisError as e:
            logger.error("Redis ping failed", error=str(e))
            return False
