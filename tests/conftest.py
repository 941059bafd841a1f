"""
Pytest configuration and fixtures.

Provides common fixtures for testing.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from ai_gateway.cache.cache_store import InMemoryCacheStore
from ai_gateway.config import GatewayConfig
from ai_gateway.features.registry import FeatureRegistry, build_default_registry
from ai_gateway.llm.retry import RetryExecutor, RetryPolicy
from ai_gateway.monitoring.usage_tracker import UsageTracker
from ai_gateway.ratelimit.backends import InMemoryCounterBackend
from ai_gateway.ratelimit.rate_limiter import FixedWindowRateLimiter
from tests.mocks.clocks import FakeClock, RecordingSleep


@pytest.fixture
def test_config() -> GatewayConfig:
    """
    Create test configuration.

    Returns:
        Test configuration instance
    """
    return GatewayConfig(
        app_env="development",
        redis_enabled=False,
        openai_api_key="test-key",
        anthropic_api_key="test-key",
    )


@pytest.fixture
def fake_clock() -> FakeClock:
    """Clock starting exactly at a minute boundary."""
    return FakeClock(1_700_000_040.0)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def registry(test_config: GatewayConfig) -> FeatureRegistry:
    return build_default_registry(test_config)


@pytest.fixture
def memory_cache() -> InMemoryCacheStore:
    return InMemoryCacheStore(max_entries=100)


@pytest.fixture
def rate_limiter(fake_clock: FakeClock) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(InMemoryCounterBackend(), clock=fake_clock)


@pytest.fixture
def fast_retry(recording_sleep: RecordingSleep) -> RetryExecutor:
    """Retry executor that never actually sleeps."""
    return RetryExecutor(
        RetryPolicy(max_attempts=3, base_delay=2.0, backoff_multiplier=2.0),
        sleep=recording_sleep,
    )


@pytest.fixture
def usage_tracker() -> UsageTracker:
    return UsageTracker()


@pytest.fixture
def mock_redis_pool():
    """
    Mock Redis connection pool.

    Returns:
        Mocked Redis pool
    """
    pool = MagicMock()
    pool.disconnect = AsyncMock()
    return pool


@pytest.fixture
def ats_payload() -> dict:
    """ATS request in the shape the frontend sends."""
    return {
        "jobDescription": (
            "We are hiring a frontend engineer with React, Node.js and TypeScript "
            "experience. Testing with Jest and accessibility knowledge preferred."
        ),
        "resumeText": (
            "Jane Doe - jane@example.com\n"
            "Experience: React developer building TypeScript dashboards for 4 years.\n"
            "Education: BSc Computer Science\n"
            "Skills: React, TypeScript, GraphQL"
        ),
    }


@pytest.fixture
def ats_upstream_json() -> str:
    """A well-formed upstream ATS answer wrapped in a code fence."""
    return (
        "```json\n"
        '{"score": 78, "missingKeywords": ["node.js", "jest"], '
        '"recommendations": ["Mention Node.js projects"]}\n'
        "```"
    )
