"""
Retry executor for upstream calls.

Sandi Metz Principles:
- Single Responsibility: Manage retry logic
- Small methods: Each method < 10 lines
- Dependency Injection: Policy and sleep function injected
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, FrozenSet, Optional, TypeVar

from ai_gateway.exceptions import (
    DeadlineExceededError,
    UpstreamExhaustedError,
    UpstreamFatalError,
    UpstreamQuotaExceededError,
)
from ai_gateway.llm.error_classifier import (
    DEFAULT_RETRYABLE_STATUSES,
    ErrorClass,
    classify_error,
)
from ai_gateway.llm.timeout_handler import Deadline, TimeoutHandler
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry policy. Stateless across calls."""

    max_attempts: int = 3
    base_delay: float = 2.0
    backoff_multiplier: float = 2.0
    max_delay: float = 30.0
    retryable_statuses: FrozenSet[int] = field(
        default_factory=lambda: DEFAULT_RETRYABLE_STATUSES
    )
    attempt_timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings) -> "RetryPolicy":
        """
        Build policy from gateway configuration.

        Args:
            settings: GatewayConfig instance

        Returns:
            Retry policy
        """
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay_seconds,
            backoff_multiplier=settings.retry_backoff_multiplier,
            max_delay=settings.retry_max_delay_seconds,
            attempt_timeout=settings.upstream_timeout_seconds,
        )

    def delay_for(self, attempt: int) -> float:
        """
        Calculate delay after a failed attempt using exponential backoff.

        Args:
            attempt: Failed attempt number (1-indexed)

        Returns:
            Delay in seconds
        """
        delay = self.base_delay * (self.backoff_multiplier ** (attempt - 1))
        return min(delay, self.max_delay)

    def total_backoff(self) -> float:
        """Sum of every backoff sleep when all attempts fail."""
        return sum(self.delay_for(n) for n in range(1, self.max_attempts))


class RetryExecutor:
    """
    Exponential backoff retry executor.

    Each failure is classified exactly once. Only transient failures are
    retried; quota and fatal failures leave immediately.
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize retry executor.

        Args:
            policy: Retry policy (uses defaults if None)
            sleep: Cancellable sleep coroutine
        """
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        self._timeouts = TimeoutHandler(self._policy.attempt_timeout)

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        deadline: Optional[Deadline] = None,
    ) -> T:
        """
        Execute operation with retry logic.

        Args:
            operation: Async function producing one upstream attempt
            deadline: Optional end-to-end request deadline

        Returns:
            Operation result

        Raises:
            UpstreamExhaustedError: Transient failures outlived every attempt
            UpstreamQuotaExceededError: Upstream quota is exhausted
            UpstreamFatalError: Non-retryable upstream failure
            DeadlineExceededError: Request deadline ran out
        """
        last_error: Optional[BaseException] = None

        for attempt in range(1, self._policy.max_attempts + 1):
            try:
                return await self._timeouts.execute(operation, deadline)
            except DeadlineExceededError:
                logger.error("Request deadline exceeded", attempt=attempt)
                raise
            except Exception as e:
                last_error = e
                self._raise_if_final(e, attempt)

            await self._backoff(attempt, last_error, deadline)

        raise UpstreamExhaustedError(self._policy.max_attempts, last_error)

    def _raise_if_final(self, error: Exception, attempt: int) -> None:
        """Classify a failure and raise unless it should be retried."""
        error_class = classify_error(error, self._policy.retryable_statuses)

        if error_class is ErrorClass.QUOTA_EXCEEDED:
            logger.warning("Upstream quota exceeded", attempt=attempt, error=str(error))
            raise UpstreamQuotaExceededError(str(error)) from error

        if error_class is ErrorClass.FATAL:
            logger.error("Upstream fatal error", attempt=attempt, error=str(error))
            raise UpstreamFatalError(
                str(error), status=getattr(error, "status", None)
            ) from error

        if attempt >= self._policy.max_attempts:
            logger.error(f"All {attempt} retry attempts failed", error=str(error))
            raise UpstreamExhaustedError(attempt, error) from error

    async def _backoff(
        self, attempt: int, error: BaseException, deadline: Optional[Deadline]
    ) -> None:
        """Sleep before the next attempt, respecting the deadline."""
        delay = self._policy.delay_for(attempt)
        if deadline is not None and deadline.remaining() < delay:
            logger.error(
                "Deadline shorter than next backoff",
                attempt=attempt,
                delay=delay,
                remaining=deadline.remaining(),
            )
            raise DeadlineExceededError(
                f"Deadline leaves no room for retry after attempt {attempt}"
            ) from error

        logger.warning(
            f"Attempt {attempt} failed, retrying in {delay:.2f}s", error=str(error)
        )
        await self._sleep(delay)
