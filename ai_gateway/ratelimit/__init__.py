"""
Rate limiting module.

Fixed-window per-identity admission over pluggable counter backends.
"""

from ai_gateway.ratelimit.backends import (
    CounterBackend,
    InMemoryCounterBackend,
    RedisCounterBackend,
)
from ai_gateway.ratelimit.rate_limiter import FixedWindowRateLimiter

__all__ = [
    "CounterBackend",
    "FixedWindowRateLimiter",
    "InMemoryCounterBackend",
    "RedisCounterBackend",
]
