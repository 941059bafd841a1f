"""
Models package for the AI gateway.

Exports all model classes for easy imports throughout the application.
"""

# Cache models
from ai_gateway.models.cache_entry import CacheEntry

# Error models
from ai_gateway.models.error import ErrorCode, ErrorResponse

# LLM models
from ai_gateway.models.llm import GenerationOptions, LLMResponse

# Rate limiting models
from ai_gateway.models.ratelimit import (
    RateLimitConfig,
    RateLimitDecision,
    RateLimitWindow,
)

# Response models
from ai_gateway.models.response import (
    CacheStatus,
    GatewayResponse,
    HealthResponse,
    ProvenanceTag,
)

__all__ = [
    "CacheEntry",
    "CacheStatus",
    "ErrorCode",
    "ErrorResponse",
    "GatewayResponse",
    "GenerationOptions",
    "HealthResponse",
    "LLMResponse",
    "ProvenanceTag",
    "RateLimitConfig",
    "RateLimitDecision",
    "RateLimitWindow",
]
