"""Test Redis repository."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from ai_gateway.exceptions import CacheUnavailableError, RateLimiterUnavailableError
from ai_gateway.models.cache_entry import CacheEntry
from ai_gateway.repositories.redis_repository import RedisRepository

REDIS_PATH = "ai_gateway.repositories.redis_repository.Redis"


@pytest.fixture
def mock_pool():
    """Create mock Redis connection pool."""
    return MagicMock()


@pytest.fixture
def redis_repository(mock_pool):
    """Create Redis repository with mock pool."""
    return RedisRepository(pool=mock_pool)


@pytest.fixture
def sample_entry():
    """Create sample cache entry."""
    return CacheEntry(
        key="0123456789abcdef",
        feature="ats-score",
        value={"score": 80, "missingKeywords": [], "recommendations": []},
        ttl_seconds=3600,
        provider="openai",
        model="gpt-4o-mini",
        prompt_tokens=100,
        completion_tokens=50,
    )


class TestRedisRepository:
    """Test Redis repository implementation."""

    @pytest.mark.asyncio
    async def test_should_fetch_entry(self, redis_repository, sample_entry):
        """Test fetching cache entry."""
        mock_redis = AsyncMock()
        mock_redis.get.return_value = sample_entry.model_dump_json()

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            result = await redis_repository.fetch("ai:0123456789abcdef")

            assert result.key == sample_entry.key
            assert result.value == sample_entry.value
            mock_redis.get.assert_called_once_with("ai:0123456789abcdef")

    @pytest.mark.asyncio
    async def test_should_return_none_when_not_found(self, redis_repository):
        """Test fetching non-existent entry."""
        mock_redis = AsyncMock()
        mock_redis.get.return_value = None

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            assert await redis_repository.fetch("ai:missing") is None

    @pytest.mark.asyncio
    async def test_should_discard_corrupt_entry(self, redis_repository):
        """Unparseable stored data is treated as absent."""
        mock_redis = AsyncMock()
        mock_redis.get.return_value = "{not json"

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            assert await redis_repository.fetch("ai:corrupt") is None

    @pytest.mark.asyncio
    async def test_fetch_raises_cache_unavailable_on_redis_error(self, redis_repository):
        """Transport errors surface as CacheUnavailableError."""
        mock_redis = AsyncMock()
        mock_redis.get.side_effect = RedisConnectionError("down")

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            with pytest.raises(CacheUnavailableError):
                await redis_repository.fetch("ai:key")

    @pytest.mark.asyncio
    async def test_should_store_entry_with_ttl(self, redis_repository, sample_entry):
        """Test storing cache entry uses SET with EX."""
        mock_redis = AsyncMock()

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            await redis_repository.store("ai:key", sample_entry, 3600)

            mock_redis.set.assert_called_once()
            args, kwargs = mock_redis.set.call_args
            assert args[0] == "ai:key"
            assert kwargs["ex"] == 3600

    @pytest.mark.asyncio
    async def test_store_raises_cache_unavailable_on_redis_error(
        self, redis_repository, sample_entry
    ):
        """Write failures surface as CacheUnavailableError."""
        mock_redis = AsyncMock()
        mock_redis.set.side_effect = RedisConnectionError("down")

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            with pytest.raises(CacheUnavailableError):
                await redis_repository.store("ai:key", sample_entry, 3600)

    @pytest.mark.asyncio
    async def test_should_delete_entry(self, redis_repository):
        """Test deleting cache entry."""
        mock_redis = AsyncMock()
        mock_redis.delete.return_value = 1

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            assert await redis_repository.delete("ai:key") is True

    @pytest.mark.asyncio
    async def test_increment_uses_transactional_pipeline(self, redis_repository):
        """INCR and EXPIRE run in one MULTI pipeline."""
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[3, True])
        mock_redis = MagicMock()
        mock_redis.pipeline.return_value.__aenter__.return_value = pipe

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            count = await redis_repository.increment("ratelimit:ai:u1:1", 60)

        assert count == 3
        mock_redis.pipeline.assert_called_once_with(transaction=True)
        pipe.incr.assert_called_once_with("ratelimit:ai:u1:1")
        pipe.expire.assert_called_once_with("ratelimit:ai:u1:1", 60)

    @pytest.mark.asyncio
    async def test_increment_raises_limiter_unavailable_on_redis_error(
        self, redis_repository
    ):
        """Counter failures surface as RateLimiterUnavailableError."""
        pipe = MagicMock()
        pipe.execute = AsyncMock(side_effect=RedisConnectionError("down"))
        mock_redis = MagicMock()
        mock_redis.pipeline.return_value.__aenter__.return_value = pipe

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            with pytest.raises(RateLimiterUnavailableError):
                await redis_repository.increment("ratelimit:ai:u1:1", 60)

    @pytest.mark.asyncio
    async def test_ping_reports_failure(self, redis_repository):
        """Ping returns False instead of raising."""
        mock_redis = AsyncMock()
        mock_redis.ping.side_effect = RedisConnectionError("down")

        with patch(REDIS_PATH) as mock_redis_class:
            mock_redis_class.return_value.__aenter__.return_value = mock_redis

            assert await redis_repository.ping() is False
