"""
Offline fallback module.

Deterministic degraded responses for when the upstream quota is gone.
"""

from ai_gateway.fallback.generator import FallbackGenerator

__all__ = ["FallbackGenerator"]
