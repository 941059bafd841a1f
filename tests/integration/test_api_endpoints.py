"""Integration tests for API endpoints."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from ai_gateway.api.deps import get_coordinator
from ai_gateway.cache.cache_store import InMemoryCacheStore
from ai_gateway.exceptions import RateLimitedError
from ai_gateway.features.registry import build_default_registry
from ai_gateway.main import ApplicationState, app
from ai_gateway.models.ratelimit import RateLimitConfig
from ai_gateway.ratelimit.backends import InMemoryCounterBackend
from ai_gateway.ratelimit.rate_limiter import FixedWindowRateLimiter
from ai_gateway.services.request_coordinator import RequestCoordinator
from tests.mocks.llm_mocks import (
    MockLLMProvider,
    fatal_error,
    quota_error,
    transient_error,
)

USER = {"X-User-ID": "user-1"}
ATS_URL = "/api/v1/ai/ats-score"


@pytest.fixture
def make_client(test_config, fake_clock, fast_retry):
    """
    Build a test client around in-memory gateway components.

    The lifespan handler is not run; state is installed directly.
    """

    def build(provider, limit: int = 2, deadline_seconds: float = 60.0):
        state = ApplicationState(test_config)
        state.cache = InMemoryCacheStore()
        state.rate_limiter = FixedWindowRateLimiter(
            InMemoryCounterBackend(), clock=fake_clock
        )
        state.llm_provider = provider
        state.registry = build_default_registry(test_config)
        state.coordinator = RequestCoordinator(
            cache=state.cache,
            rate_limiter=state.rate_limiter,
            retry_executor=fast_retry,
            llm_provider=provider,
            registry=state.registry,
            rate_limit=RateLimitConfig.per_minute(limit),
            usage_tracker=state.usage_tracker,
            deadline_seconds=deadline_seconds,
        )
        app.state.app_state = state
        return TestClient(app)

    yield build

    app.dependency_overrides.clear()
    if hasattr(app.state, "app_state"):
        del app.state.app_state


def variant(payload: dict, suffix: str) -> dict:
    return {**payload, "resumeText": payload["resumeText"] + f"\n{suffix}"}


class TestHealthEndpoints:
    """Integration tests for health endpoints."""

    def test_health_endpoint(self, make_client):
        """Test /health endpoint returns healthy status."""
        client = make_client(MockLLMProvider())

        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data
        assert "environment" in data

    def test_ready_endpoint(self, make_client):
        """Test /ready endpoint returns component statuses."""
        client = make_client(MockLLMProvider())

        response = client.get("/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["cache"]["status"] == "healthy"
        assert data["components"]["llm"]["message"] == "mock-provider"

    def test_ready_reports_degraded_cache(self, make_client):
        client = make_client(MockLLMProvider())
        app.state.app_state.cache = AsyncMock()
        app.state.app_state.cache.health_check.return_value = False

        data = client.get("/ready").json()

        assert data["status"] == "degraded"
        assert data["components"]["cache"]["status"] == "degraded"


class TestAIFeatureEndpoint:
    """Integration tests for the AI feature endpoint."""

    def test_requires_identity(self, make_client, ats_payload):
        client = make_client(MockLLMProvider())

        response = client.post(ATS_URL, json=ats_payload)

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_unknown_feature(self, make_client):
        client = make_client(MockLLMProvider())

        response = client.post("/api/v1/ai/horoscope", json={}, headers=USER)

        assert response.status_code == 404
        assert response.json()["error_code"] == "UNKNOWN_FEATURE"

    def test_invalid_payload(self, make_client):
        client = make_client(MockLLMProvider())

        response = client.post(ATS_URL, json={"resumeText": "x"}, headers=USER)

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_REQUEST"

    def test_miss_then_hit(self, make_client, ats_payload, ats_upstream_json):
        provider = MockLLMProvider([ats_upstream_json])
        client = make_client(provider)

        first = client.post(ATS_URL, json=ats_payload, headers=USER)
        second = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert first.status_code == 200
        assert first.headers["X-Cache"] == "MISS"
        assert first.headers["X-RateLimit-Limit"] == "2"
        assert "X-Cost-Saved" not in first.headers
        assert second.headers["X-Cache"] == "HIT"
        assert second.headers["X-Cost-Saved"] == "true"
        assert second.json() == first.json()
        assert first.json()["score"] == 78
        assert "X-Request-ID" in first.headers
        assert provider.call_count == 1

    def test_rate_limited(self, make_client, ats_payload, ats_upstream_json):
        client = make_client(MockLLMProvider([ats_upstream_json]), limit=1)

        client.post(ATS_URL, json=ats_payload, headers=USER)
        response = client.post(ATS_URL, json=variant(ats_payload, "B"), headers=USER)

        assert response.status_code == 429
        assert 1 <= int(response.headers["Retry-After"]) <= 60
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.json()["error_code"] == "RATE_LIMIT_EXCEEDED"

    def test_rate_limit_is_per_identity(self, make_client, ats_payload, ats_upstream_json):
        client = make_client(MockLLMProvider([ats_upstream_json]), limit=1)

        client.post(ATS_URL, json=ats_payload, headers=USER)
        response = client.post(
            ATS_URL, json=variant(ats_payload, "B"), headers={"X-User-ID": "user-2"}
        )

        assert response.status_code == 200

    def test_quota_returns_fallback(self, make_client, ats_payload):
        client = make_client(MockLLMProvider([quota_error()]))

        response = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert response.status_code == 200
        assert response.headers["X-Cache"] == "FALLBACK"
        body = response.json()
        assert body["fallback"] is True
        assert body["quotaExceeded"] is True
        assert body["note"]

    def test_exhausted_retries(self, make_client, ats_payload):
        client = make_client(MockLLMProvider([transient_error(503)]))

        response = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert response.status_code == 503
        assert response.json()["error_code"] == "UPSTREAM_EXHAUSTED"

    def test_fatal_upstream_error(self, make_client, ats_payload):
        client = make_client(MockLLMProvider([fatal_error(401)]))

        response = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert response.status_code == 502
        assert response.json()["error_code"] == "UPSTREAM_ERROR"

    def test_unusable_upstream_output(self, make_client, ats_payload):
        client = make_client(MockLLMProvider(["I am not JSON"]))

        response = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert response.status_code == 502
        assert response.json()["error_code"] == "VALIDATION_FAILED"

    def test_deadline_exceeded(self, make_client, ats_payload, ats_upstream_json):
        client = make_client(MockLLMProvider([ats_upstream_json]), deadline_seconds=0.0)

        response = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert response.status_code == 504
        assert response.json()["error_code"] == "DEADLINE_EXCEEDED"

    def test_unexpected_error_is_internal(self, make_client, ats_payload):
        client = make_client(MockLLMProvider())
        coordinator = AsyncMock()
        coordinator.handle.side_effect = RuntimeError("boom")
        app.dependency_overrides[get_coordinator] = lambda: coordinator

        response = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert response.status_code == 500
        assert response.json()["error_code"] == "INTERNAL_ERROR"

    def test_rate_limited_without_decision(self, make_client, ats_payload):
        client = make_client(MockLLMProvider())
        coordinator = AsyncMock()
        coordinator.handle.side_effect = RateLimitedError(retry_after=12, limit=10)
        app.dependency_overrides[get_coordinator] = lambda: coordinator

        response = client.post(ATS_URL, json=ats_payload, headers=USER)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "12"


class TestMetricsEndpoints:
    """Integration tests for metrics endpoints."""

    def test_usage_metrics(self, make_client, ats_payload, ats_upstream_json):
        client = make_client(MockLLMProvider([ats_upstream_json]))
        client.post(ATS_URL, json=ats_payload, headers=USER)
        client.post(ATS_URL, json=ats_payload, headers=USER)

        response = client.get("/api/v1/metrics/usage")

        assert response.status_code == 200
        usage = response.json()["usage"]["features"]["ats-score"]
        assert usage["generated"] == 1
        assert usage["cached"] == 1
        assert usage["tokensSaved"] == 15
