"""
Request deadlines and per-attempt timeouts.

Sandi Metz Principles:
- Single Responsibility: Bound how long upstream work may run
- Small methods: Each method < 10 lines
- Clear naming: Self-documenting code
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, TypeVar

from ai_gateway.exceptions import DeadlineExceededError, UpstreamError
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class Deadline:
    """
    Absolute point in time by which a request must finish.

    Measured on the monotonic clock.
    """

    def __init__(self, expires_at: float, clock: Callable[[], float] = time.monotonic):
        """
        Initialize deadline.

        Args:
            expires_at: Monotonic timestamp at which the deadline passes
            clock: Monotonic time source
        """
        self._expires_at = expires_at
        self._clock = clock

    @classmethod
    def after(
        cls, seconds: float, clock: Callable[[], float] = time.monotonic
    ) -> "Deadline":
        """
        Create a deadline relative to now.

        Args:
            seconds: Seconds from now
            clock: Monotonic time source

        Returns:
            Deadline instance
        """
        return cls(clock() + seconds, clock)

    def remaining(self) -> float:
        """Seconds left, never negative."""
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0.0

    def check(self) -> None:
        """
        Raise if the deadline has passed.

        Raises:
            DeadlineExceededError: If no time is left
        """
        if self.expired:
            raise DeadlineExceededError("Request deadline exceeded")


class TimeoutHandler:
    """
    Wraps a single upstream attempt with timeout protection.

    The effective timeout is the smaller of the per-attempt timeout and
    whatever is left of the request deadline.
    """

    def __init__(self, timeout_seconds: float = 30.0):
        """
        Initialize timeout handler.

        Args:
            timeout_seconds: Per-attempt timeout
        """
        self._timeout_seconds = timeout_seconds

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        deadline: Optional[Deadline] = None,
    ) -> T:
        """
        Execute operation with timeout.

        Args:
            operation: Async function to execute
            deadline: Optional request deadline

        Returns:
            Operation result

        Raises:
            DeadlineExceededError: If the request deadline ran out
            UpstreamError: If only the attempt timeout ran out (transient)
        """
        timeout = self.effective_timeout(deadline)
        if timeout <= 0.0:
            raise DeadlineExceededError("Request deadline exceeded before attempt")

        try:
            return await asyncio.wait_for(operation(), timeout=timeout)
        except asyncio.TimeoutError as e:
            return self._handle_timeout(timeout, deadline, e)

    def effective_timeout(self, deadline: Optional[Deadline] = None) -> float:
        """
        Timeout for the next attempt.

        Args:
            deadline: Optional request deadline

        Returns:
            Timeout in seconds
        """
        if deadline is None:
            return self._timeout_seconds
        return min(self._timeout_seconds, deadline.remaining())

    def _handle_timeout(
        self, timeout: float, deadline: Optional[Deadline], error: Exception
    ):
        """Translate a timeout into the matching gateway error."""
        logger.warning("Upstream attempt timed out", timeout=timeout)

        if deadline is not None and deadline.expired:
            raise DeadlineExceededError(
                f"Request deadline exceeded after {timeout:.2f}s attempt"
            ) from error

        raise UpstreamError(
            f"Upstream timed out after {timeout:.2f} seconds",
            is_transport_error=True,
        ) from error

    def get_timeout(self) -> float:
        """
        Get configured timeout value.

        Returns:
            Timeout in seconds
        """
        return self._timeout_seconds
