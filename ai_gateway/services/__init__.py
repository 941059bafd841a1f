"""
Service layer.

Request orchestration for AI features.
"""

from ai_gateway.services.request_coordinator import RequestCoordinator

__all__ = ["RequestCoordinator"]
