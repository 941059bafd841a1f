"""
Per-identity fixed-window rate limiter.

Sandi Metz Principles:
- Single Responsibility: Admission decisions
- Small methods: Each method < 10 lines
- Dependency Injection: Counter backend and clock injected

Requests are counted in fixed windows keyed by (identity, bucket), where
bucket = floor(now / window). The counter is incremented before the
limit is compared, so a rejected request still occupies a slot.
"""

import asyncio
import math
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from ai_gateway.exceptions import RateLimiterUnavailableError
from ai_gateway.models.ratelimit import RateLimitConfig, RateLimitDecision, RateLimitWindow
from ai_gateway.ratelimit.backends import CounterBackend
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class FixedWindowRateLimiter:
    """
    Fixed-window request counter per identity.

    Trades the boundary burst of fixed windows for one atomic increment
    per request.
    """

    def __init__(
        self,
        backend: CounterBackend,
        fail_open: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize rate limiter.

        Args:
            backend: Counter backend with atomic increment
            fail_open: Admit requests when the backend is unavailable
            clock: Wall clock in seconds
        """
        self._backend = backend
        self._fail_open = fail_open
        self._clock = clock

    async def admit(
        self,
        identity: str,
        limit: int,
        window_seconds: int = 60,
        scope: str = "ai",
        timeout: Optional[float] = None,
    ) -> RateLimitDecision:
        """
        Count a request and decide whether to admit it.

        Args:
            identity: Opaque caller identifier
            limit: Requests allowed per window
            window_seconds: Window length
            scope: Feature class namespace
            timeout: Seconds the counter may take before it counts as unavailable

        Returns:
            Admission decision
        """
        now = self._clock()
        bucket = int(now // window_seconds)
        key = self.counter_key(scope, identity, bucket)

        try:
            count = await self._increment(key, window_seconds, timeout)
        except RateLimiterUnavailableError as e:
            return self._decide_without_backend(identity, limit, window_seconds, bucket, e)

        window = RateLimitWindow.for_bucket(identity, bucket, count, limit, window_seconds)
        return self._decide(window, now)

    async def admit_with(
        self,
        identity: str,
        config: RateLimitConfig,
        timeout: Optional[float] = None,
    ) -> RateLimitDecision:
        """
        Admit using a feature class configuration.

        Args:
            identity: Opaque caller identifier
            config: Rate limit configuration
            timeout: Seconds the counter may take

        Returns:
            Admission decision
        """
        return await self.admit(
            identity, config.limit, config.window_seconds, config.scope, timeout
        )

    async def _increment(
        self, key: str, window_seconds: int, timeout: Optional[float]
    ) -> int:
        """
        Increment the counter within the time budget.

        Raises:
            RateLimiterUnavailableError: If the backend failed or timed out
        """
        try:
            return await asyncio.wait_for(
                self._backend.increment(key, window_seconds), timeout
            )
        except asyncio.TimeoutError as e:
            raise RateLimiterUnavailableError(
                f"Rate counter did not answer within {timeout:.2f}s"
            ) from e

    def _decide(self, window: RateLimitWindow, now: float) -> RateLimitDecision:
        """Build decision from post-increment window state."""
        allowed = window.count <= window.limit
        reset_at = window.reset_at
        retry_after = 0
        if not allowed:
            retry_after = self._retry_after(reset_at, now, window.window_seconds)
            logger.warning(
                "Rate limit exceeded",
                identity=window.identity,
                count=window.count,
                limit=window.limit,
                retry_after=retry_after,
            )

        return RateLimitDecision(
            allowed=allowed,
            limit=window.limit,
            remaining=max(0, window.limit - window.count),
            retry_after=retry_after,
            reset_at=reset_at,
        )

    def _decide_without_backend(
        self,
        identity: str,
        limit: int,
        window_seconds: int,
        bucket: int,
        error: Exception,
    ) -> RateLimitDecision:
        """Apply the configured fail-open / fail-closed policy."""
        reset_at = datetime.fromtimestamp((bucket + 1) * window_seconds, tz=timezone.utc)
        if self._fail_open:
            logger.warning(
                "Rate limiter unavailable, failing open",
                identity=identity,
                error=str(error),
            )
            return RateLimitDecision(
                allowed=True,
                limit=limit,
                remaining=limit,
                reset_at=reset_at,
                fail_open=True,
            )

        logger.error(
            "Rate limiter unavailable, failing closed",
            identity=identity,
            error=str(error),
        )
        return RateLimitDecision(
            allowed=False,
            limit=limit,
            remaining=0,
            retry_after=window_seconds,
            reset_at=reset_at,
        )

    @staticmethod
    def _retry_after(reset_at: datetime, now: float, window_seconds: int) -> int:
        """Seconds until rollover, clamped to [1, window]."""
        seconds = math.ceil(reset_at.timestamp() - now)
        return max(1, min(window_seconds, seconds))

    @staticmethod
    def counter_key(scope: str, identity: str, bucket: int) -> str:
        """
        Build counter key.

        Args:
            scope: Feature class namespace
            identity: Caller identifier
            bucket: Window index

        Returns:
            Counter key
        """
        return f"ratelimit:{scope}:{identity}:{bucket}"
