"""
Cache entry models.

Sandi Metz Principles:
- Single Responsibility: Cache data structure
- Clear naming: Descriptive fields
- Validated data: Only schema-checked bodies are stored
"""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheEntry(BaseModel):
    """Cache entry holding one validated upstream result."""

    key: str = Field(..., min_length=1, description="Content-addressed cache key")
    feature: str = Field(..., description="Feature kind that produced the value")
    value: Dict[str, Any] = Field(..., description="Validated response body")
    ttl_seconds: int = Field(..., ge=1, description="Time-to-live in seconds")
    stored_at: datetime = Field(
        default_factory=_utcnow, description="Cache entry creation time"
    )
    provider: str = Field(default="unknown", description="LLM provider used")
    model: str = Field(default="unknown", description="Model used")
    prompt_tokens: int = Field(default=0, ge=0, description="Prompt tokens")
    completion_tokens: int = Field(default=0, ge=0, description="Completion tokens")

    @property
    def total_tokens(self) -> int:
        """Calculate total tokens a hit saves."""
        return self.prompt_tokens + self.completion_tokens

    @property
    def age_seconds(self) -> float:
        """Calculate entry age in seconds."""
        return (_utcnow() - self.stored_at).total_seconds()

    @property
    def remaining_ttl_seconds(self) -> float:
        """Seconds left before the entry expires (0 when expired)."""
        return max(0.0, self.ttl_seconds - self.age_seconds)

    @property
    def is_expired(self) -> bool:
        """Check whether the entry outlived its TTL."""
        return self.age_seconds >= self.ttl_seconds
