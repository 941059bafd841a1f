"""
Request coordinator.

Runs every AI feature request through one fixed state machine:
CacheCheck -> RateCheck -> Upstream (with retry) -> Success | Degraded | Fatal.

Sandi Metz Principles:
- Single Responsibility: Request orchestration
- Small methods: Each method < 10 lines
- Dependency Injection: Every collaborator injected
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ai_gateway.cache.cache_store import CacheStore
from ai_gateway.exceptions import (
    GatewayError,
    RateLimitedError,
    UpstreamQuotaExceededError,
)
from ai_gateway.fallback.generator import FallbackGenerator
from ai_gateway.features.registry import FeatureKind, FeaturePolicy, FeatureRegistry
from ai_gateway.features.schemas import FeatureRequest
from ai_gateway.llm.provider import BaseLLMProvider
from ai_gateway.llm.response_parser import LLMResponseParser
from ai_gateway.llm.retry import RetryExecutor
from ai_gateway.llm.timeout_handler import Deadline
from ai_gateway.models.cache_entry import CacheEntry
from ai_gateway.models.llm import LLMResponse
from ai_gateway.models.ratelimit import RateLimitConfig, RateLimitDecision
from ai_gateway.models.response import GatewayResponse, ProvenanceTag
from ai_gateway.monitoring.usage_tracker import UsageTracker
from ai_gateway.pipeline.single_flight import SingleFlight
from ai_gateway.ratelimit.rate_limiter import FixedWindowRateLimiter
from ai_gateway.utils.hasher import derive_cache_key
from ai_gateway.utils.logger import get_logger, log_cache_hit, log_cache_miss, log_fallback

logger = get_logger(__name__)


@dataclass
class UpstreamOutcome:
    """What the upstream phase produced."""

    body: Dict[str, Any]
    provenance: ProvenanceTag
    tokens_used: int = 0


class RequestCoordinator:
    """
    Main AI request orchestration service.

    Cache hits return before rate limiting, so they never consume a
    rate-limit slot. Degraded results are never written to the cache.
    """

    def __init__(
        self,
        cache: CacheStore,
        rate_limiter: FixedWindowRateLimiter,
        retry_executor: RetryExecutor,
        llm_provider: BaseLLMProvider,
        registry: FeatureRegistry,
        fallback: Optional[FallbackGenerator] = None,
        rate_limit: Optional[RateLimitConfig] = None,
        usage_tracker: Optional[UsageTracker] = None,
        single_flight: Optional[SingleFlight] = None,
        deadline_seconds: float = 60.0,
    ):
        """
        Initialize coordinator.

        Args:
            cache: Cache store
            rate_limiter: Per-identity rate limiter
            retry_executor: Retry executor for upstream calls
            llm_provider: Upstream provider
            registry: Feature policies
            fallback: Offline fallback generator
            rate_limit: Limit applied to AI generation (10/min if None)
            usage_tracker: Optional usage tracker
            single_flight: Optional coalescing of concurrent misses
            deadline_seconds: Default end-to-end deadline
        """
        self._cache = cache
        self._rate_limiter = rate_limiter
        self._retry = retry_executor
        self._llm = llm_provider
        self._registry = registry
        self._fallback = fallback or FallbackGenerator()
        self._rate_limit = rate_limit or RateLimitConfig.per_minute(10)
        self._usage = usage_tracker
        self._single_flight = single_flight
        self._deadline_seconds = deadline_seconds

    async def handle(
        self,
        feature: FeatureKind | str,
        identity: str,
        payload: Mapping[str, Any],
        deadline: Optional[Deadline] = None,
    ) -> GatewayResponse:
        """
        Handle one feature request.

        Args:
            feature: Feature kind
            identity: Opaque caller identifier
            payload: Request payload
            deadline: End-to-end deadline (configured default if None)

        Returns:
            Gateway response with provenance

        Raises:
            UnknownFeatureError: If feature is not registered
            InvalidRequestError: If payload is invalid
            RateLimitedError: If identity exceeded its window
            UpstreamExhaustedError: If transient failures outlived retries
            UpstreamFatalError: If upstream failed non-retryably
            ValidationFailedError: If upstream output was unusable
            DeadlineExceededError: If the deadline ran out
        """
        start_time = time.perf_counter()
        policy = self._registry.get(feature)
        request = policy.parse_request(payload)
        key = derive_cache_key(policy.kind.value, request.canonical_payload())
        deadline = deadline or Deadline.after(self._deadline_seconds)

        try:
            return await self._run(policy, request, key, identity, deadline, start_time)
        except GatewayError as e:
            self._record(policy.kind.value, "failed", start_time)
            logger.warning(
                "Feature request failed",
                feature=policy.kind.value,
                key=key,
                error_type=type(e).__name__,
            )
            raise

    async def _run(
        self,
        policy: FeaturePolicy,
        request: FeatureRequest,
        key: str,
        identity: str,
        deadline: Deadline,
        start_time: float,
    ) -> GatewayResponse:
        """Walk the state machine after validation."""
        cached = await self._check_cache(policy, key, deadline)
        if cached is not None:
            latency = self._record(
                policy.kind.value, "cached", start_time, tokens_saved=cached.total_tokens
            )
            return self._build_response(
                policy, key, cached.value, ProvenanceTag.CACHED, latency
            )

        decision = await self._check_rate_limit(identity, deadline)
        deadline.check()
        outcome = await self._resolve_upstream(policy, request, key, deadline)

        latency = self._record(
            policy.kind.value,
            outcome.provenance.value,
            start_time,
            tokens_used=outcome.tokens_used,
        )
        return self._build_response(
            policy, key, outcome.body, outcome.provenance, latency, decision
        )

    async def _check_cache(
        self, policy: FeaturePolicy, key: str, deadline: Deadline
    ) -> Optional[CacheEntry]:
        """
        CacheCheck state. A lookup that outlives the deadline is a miss.

        Args:
            policy: Feature policy
            key: Cache key
            deadline: Request deadline

        Returns:
            Cache entry on hit
        """
        try:
            entry = await asyncio.wait_for(self._cache.get(key), deadline.remaining())
        except asyncio.TimeoutError:
            logger.warning("Cache lookup timed out", feature=policy.kind.value, key=key)
            entry = None

        if entry is None:
            log_cache_miss(policy.kind.value, key)
            return None

        log_cache_hit(policy.kind.value, key, age=round(entry.age_seconds, 1))
        return entry

    async def _check_rate_limit(
        self, identity: str, deadline: Deadline
    ) -> RateLimitDecision:
        """
        RateCheck state. A counter that outlives the deadline is unavailable.

        Raises:
            RateLimitedError: If the request is not admitted
        """
        decision = await self._rate_limiter.admit_with(
            identity, self._rate_limit, timeout=deadline.remaining()
        )
        if not decision.allowed:
            raise RateLimitedError(decision.retry_after, decision.limit, decision)
        return decision

    async def _resolve_upstream(
        self,
        policy: FeaturePolicy,
        request: FeatureRequest,
        key: str,
        deadline: Deadline,
    ) -> UpstreamOutcome:
        """Upstream state, optionally coalesced per key."""
        if self._single_flight is None:
            return await self._generate(policy, request, key, deadline)

        return await self._single_flight.do(
            key, lambda: self._generate(policy, request, key, deadline)
        )

    async def _generate(
        self,
        policy: FeaturePolicy,
        request: FeatureRequest,
        key: str,
        deadline: Deadline,
    ) -> UpstreamOutcome:
        """
        Call upstream through the retry executor and validate the result.

        Raises:
            ValidationFailedError: If the output is unusable (not cached)
        """
        prompt = policy.build_prompt(request)

        try:
            llm_response = await self._retry.execute(
                lambda: self._llm.generate_text(prompt, policy.options), deadline
            )
        except UpstreamQuotaExceededError as e:
            return self._degrade(policy, request, str(e))

        result = LLMResponseParser.parse(llm_response.content, policy.response_model)
        body = result.as_generated().to_body()
        await self._store(policy, key, body, llm_response, deadline)

        return UpstreamOutcome(
            body=body,
            provenance=ProvenanceTag.GENERATED,
            tokens_used=llm_response.total_tokens,
        )

    def _degrade(
        self, policy: FeaturePolicy, request: FeatureRequest, reason: str
    ) -> UpstreamOutcome:
        """Degraded terminal state. The body is never cached."""
        log_fallback(policy.kind.value, reason=reason)
        body = self._fallback.generate(policy.kind, request.model_dump())
        return UpstreamOutcome(body=body, provenance=ProvenanceTag.FALLBACK)

    async def _store(
        self,
        policy: FeaturePolicy,
        key: str,
        body: Dict[str, Any],
        llm_response: LLMResponse,
        deadline: Deadline,
    ) -> None:
        """Write a validated result; failures and timeouts are logged, never raised."""
        entry = CacheEntry(
            key=key,
            feature=policy.kind.value,
            value=body,
            ttl_seconds=policy.ttl_seconds,
            provider=self._llm.get_name(),
            model=llm_response.model,
            prompt_tokens=llm_response.prompt_tokens,
            completion_tokens=llm_response.completion_tokens,
        )
        try:
            await asyncio.wait_for(self._cache.set(entry), deadline.remaining())
        except asyncio.TimeoutError:
            logger.warning("Cache write timed out", feature=policy.kind.value, key=key)

    def _build_response(
        self,
        policy: FeaturePolicy,
        key: str,
        body: Dict[str, Any],
        provenance: ProvenanceTag,
        latency_ms: float,
        decision: Optional[RateLimitDecision] = None,
    ) -> GatewayResponse:
        return GatewayResponse(
            feature=policy.kind.value,
            body=body,
            provenance=provenance,
            cache_key=key,
            latency_ms=latency_ms,
            rate_limit=decision,
        )

    def _record(
        self,
        feature: str,
        outcome: str,
        start_time: float,
        tokens_used: int = 0,
        tokens_saved: int = 0,
    ) -> float:
        """Record usage and return elapsed milliseconds."""
        latency_ms = (time.perf_counter() - start_time) * 1000
        if self._usage is not None:
            self._usage.record(
                feature,
                outcome,
                latency_ms=latency_ms,
                tokens_used=tokens_used,
                tokens_saved=tokens_saved,
            )
        return latency_ms
