"""
Error response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Consistent error handling
- Clear naming conventions
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Standard error codes for API responses."""

    UNAUTHORIZED = "UNAUTHORIZED"
    UNKNOWN_FEATURE = "UNKNOWN_FEATURE"
    INVALID_REQUEST = "INVALID_REQUEST"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    UPSTREAM_EXHAUSTED = "UPSTREAM_EXHAUSTED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """Standard error response format."""

    detail: str = Field(..., description="Error message describing what went wrong")
    error_code: ErrorCode = Field(..., description="Standard error code")
    retry_after: Optional[int] = Field(
        None, ge=0, description="Seconds to wait before retrying"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Error timestamp (ISO 8601)",
    )

    @classmethod
    def unauthorized(cls, header: str) -> "ErrorResponse":
        """Create missing identity error."""
        return cls(
            detail=f"Missing caller identity header: {header}",
            error_code=ErrorCode.UNAUTHORIZED,
        )

    @classmethod
    def unknown_feature(cls, feature: str) -> "ErrorResponse":
        """Create unknown feature error."""
        return cls(
            detail=f"Unknown AI feature: {feature}",
            error_code=ErrorCode.UNKNOWN_FEATURE,
        )

    @classmethod
    def invalid_request(cls, detail: str) -> "ErrorResponse":
        """Create invalid request error."""
        return cls(detail=detail, error_code=ErrorCode.INVALID_REQUEST)

    @classmethod
    def rate_limit_exceeded(cls, retry_after: int) -> "ErrorResponse":
        """Create rate limit exceeded error."""
        return cls(
            detail=f"Too many requests. Please try again in {retry_after} seconds.",
            error_code=ErrorCode.RATE_LIMIT_EXCEEDED,
            retry_after=retry_after,
        )

    @classmethod
    def upstream_exhausted(cls, attempts: int) -> "ErrorResponse":
        """Create retries exhausted error."""
        return cls(
            detail=f"AI service unavailable after {attempts} attempts",
            error_code=ErrorCode.UPSTREAM_EXHAUSTED,
        )

    @classmethod
    def upstream_error(cls, detail: Optional[str] = None) -> "ErrorResponse":
        """Create non-retryable upstream error."""
        return cls(
            detail=detail or "AI service error",
            error_code=ErrorCode.UPSTREAM_ERROR,
        )

    @classmethod
    def validation_failed(cls) -> "ErrorResponse":
        """Create unusable upstream content error."""
        return cls(
            detail="AI service returned an unusable response",
            error_code=ErrorCode.VALIDATION_FAILED,
        )

    @classmethod
    def deadline_exceeded(cls) -> "ErrorResponse":
        """Create deadline exceeded error."""
        return cls(
            detail="Request deadline exceeded",
            error_code=ErrorCode.DEADLINE_EXCEEDED,
        )

    @classmethod
    def internal_error(cls, detail: Optional[str] = None) -> "ErrorResponse":
        """Create internal server error."""
        return cls(
            detail=detail or "Internal server error",
            error_code=ErrorCode.INTERNAL_ERROR,
        )
