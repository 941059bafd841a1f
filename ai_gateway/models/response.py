"""
Gateway response models.

Sandi Metz Principles:
- Small classes with clear purpose
- Immutable response data
- Clear naming conventions
"""

from enum import Enum
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from ai_gateway.models.ratelimit import RateLimitDecision


class ProvenanceTag(str, Enum):
    """Where a response body came from."""

    CACHED = "cached"
    GENERATED = "generated"
    FALLBACK = "fallback"


class CacheStatus(str, Enum):
    """Cache status surfaced in the X-Cache header."""

    HIT = "HIT"
    MISS = "MISS"
    FALLBACK = "FALLBACK"

    @classmethod
    def from_provenance(cls, provenance: ProvenanceTag) -> "CacheStatus":
        """Map provenance to cache status."""
        return {
            ProvenanceTag.CACHED: cls.HIT,
            ProvenanceTag.GENERATED: cls.MISS,
            ProvenanceTag.FALLBACK: cls.FALLBACK,
        }[provenance]


class GatewayResponse(BaseModel):
    """Result of one coordinated request."""

    feature: str = Field(..., description="Feature kind")
    body: Dict[str, Any] = Field(..., description="Response body")
    provenance: ProvenanceTag = Field(..., description="Response provenance")
    cache_key: str = Field(..., description="Content-addressed key of the request")
    latency_ms: float = Field(..., ge=0, description="Latency in milliseconds")
    rate_limit: Optional[RateLimitDecision] = Field(
        None, description="Admission decision (absent on cache hits)"
    )

    @property
    def cache_status(self) -> CacheStatus:
        """Cache status for response headers."""
        return CacheStatus.from_provenance(self.provenance)

    @property
    def from_cache(self) -> bool:
        """Check if response came from cache."""
        return self.provenance == ProvenanceTag.CACHED

    @property
    def cost_saved(self) -> bool:
        """A cache hit saved a paid upstream call."""
        return self.from_cache

    @property
    def is_degraded(self) -> bool:
        """Check if response came from the offline fallback."""
        return self.provenance == ProvenanceTag.FALLBACK

    def metadata_headers(self) -> Dict[str, str]:
        """Observability headers for the immediate caller."""
        headers = {
            "X-Cache": self.cache_status.value,
            "X-Provenance": self.provenance.value,
        }
        if self.cost_saved:
            headers["X-Cost-Saved"] = "true"
        if self.rate_limit is not None:
            headers.update(self.rate_limit.as_headers())
        return headers


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["healthy", "unhealthy"] = Field(..., description="Service status")
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")
