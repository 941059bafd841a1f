"""
Custom exceptions for the gateway.

Only RateLimitedError, UpstreamExhaustedError, UpstreamFatalError,
ValidationFailedError and DeadlineExceededError reach callers of the
request coordinator. The rest are resolved inside the gateway.
"""

from typing import Optional


class GatewayError(Exception):
    """Base exception for gateway errors."""

    pass


class ConfigurationError(GatewayError):
    """Raised when configuration is invalid."""

    pass


class InvalidRequestError(GatewayError):
    """Raised when an inbound payload fails validation."""

    pass


class UnknownFeatureError(GatewayError):
    """Raised when a feature kind is not registered."""

    pass


class CacheUnavailableError(GatewayError):
    """Raised by cache backends on transport failure; degrades to a miss."""

    pass


class RateLimiterUnavailableError(GatewayError):
    """Raised by counter backends on transport failure."""

    pass


class RateLimitedError(GatewayError):
    """Raised when an identity exceeded its request window."""

    def __init__(self, retry_after: int, limit: int, decision=None):
        super().__init__(f"Rate limit exceeded. Retry after {retry_after} seconds")
        self.retry_after = retry_after
        self.limit = limit
        self.decision = decision


class UpstreamError(GatewayError):
    """
    Raw failure reported by an upstream provider.

    Carries just enough structure for one classification step.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        is_quota_error: bool = False,
        is_transport_error: bool = False,
    ):
        super().__init__(message)
        self.status = status
        self.is_quota_error = is_quota_error
        self.is_transport_error = is_transport_error


class UpstreamExhaustedError(GatewayError):
    """Raised when a transient upstream failure outlived every retry."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(f"Upstream still failing after {attempts} attempts")
        self.attempts = attempts
        self.last_error = last_error


class UpstreamQuotaExceededError(GatewayError):
    """Raised when the upstream quota is exhausted; routed to fallback."""

    pass


class UpstreamFatalError(GatewayError):
    """Raised for non-retryable upstream failures."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ValidationFailedError(GatewayError):
    """Raised when the upstream answered but the content is unusable."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


class DeadlineExceededError(GatewayError):
    """Raised when the end-to-end request deadline ran out."""

    pass
