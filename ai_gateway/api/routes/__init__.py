"""
API Routes module.

Contains all API endpoint routers.
"""

from ai_gateway.api.routes import ai, docs, health, metrics

__all__ = ["ai", "docs", "health", "metrics"]
