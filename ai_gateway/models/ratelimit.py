"""
Rate limiting models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable rate limit data
- Clear naming conventions
"""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, model_validator


class RateLimitConfig(BaseModel):
    """Rate limit configuration for one feature class."""

    limit: int = Field(..., ge=1, description="Requests allowed per window")
    window_seconds: int = Field(..., ge=1, description="Time window in seconds")
    scope: str = Field(default="ai", description="Counter namespace")

    @classmethod
    def per_minute(cls, limit: int, scope: str = "ai") -> "RateLimitConfig":
        """Create per-minute rate limit."""
        return cls(limit=limit, window_seconds=60, scope=scope)


class RateLimitWindow(BaseModel):
    """Counter state for one identity in one fixed window."""

    identity: str = Field(..., description="Opaque caller identifier")
    window_start: datetime = Field(..., description="Start of the window (UTC)")
    count: int = Field(..., ge=0, description="Requests counted in this window")
    limit: int = Field(..., ge=1, description="Requests allowed per window")
    window_seconds: int = Field(..., ge=1, description="Window length in seconds")

    @classmethod
    def for_bucket(
        cls, identity: str, bucket: int, count: int, limit: int, window_seconds: int
    ) -> "RateLimitWindow":
        """Build window state from a bucket index."""
        return cls(
            identity=identity,
            window_start=datetime.fromtimestamp(
                bucket * window_seconds, tz=timezone.utc
            ),
            count=count,
            limit=limit,
            window_seconds=window_seconds,
        )

    @property
    def reset_at(self) -> datetime:
        """When the next window starts."""
        return datetime.fromtimestamp(
            self.window_start.timestamp() + self.window_seconds, tz=timezone.utc
        )

    @property
    def admitted(self) -> int:
        """Requests admitted in this window (never above limit)."""
        return min(self.count, self.limit)


class RateLimitDecision(BaseModel):
    """Outcome of one admission check."""

    allowed: bool = Field(..., description="Whether the request was admitted")
    limit: int = Field(..., ge=1, description="Total requests allowed per window")
    remaining: int = Field(..., ge=0, description="Requests remaining in window")
    retry_after: int = Field(
        default=0, ge=0, description="Seconds until the window rolls over"
    )
    reset_at: datetime = Field(..., description="When the limit resets (UTC)")
    fail_open: bool = Field(
        default=False, description="Decided without a counter backend"
    )

    @model_validator(mode="after")
    def validate_remaining(self) -> "RateLimitDecision":
        """Validate remaining doesn't exceed limit."""
        if self.remaining > self.limit:
            raise ValueError(
                f"remaining ({self.remaining}) cannot exceed limit ({self.limit})"
            )
        return self

    @property
    def reset_epoch(self) -> int:
        """Reset time as a unix timestamp."""
        return int(self.reset_at.timestamp())

    def as_headers(self) -> dict[str, str]:
        """Render standard rate limit headers."""
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_epoch),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers
