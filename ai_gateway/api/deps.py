"""
API dependency injection.

Sandi Metz Principles:
- Single Responsibility: Dependency lookup and injection
- Dependency Inversion: Routes depend on components built at startup
"""

from typing import Optional

from fastapi import Request

from ai_gateway.config import config
from ai_gateway.monitoring.usage_tracker import UsageTracker
from ai_gateway.services.request_coordinator import RequestCoordinator
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)


def get_app_state(request: Request):
    """
    Get application state built by the lifespan handler.

    Args:
        request: FastAPI request

    Returns:
        ApplicationState instance
    """
    return request.app.state.app_state


async def get_coordinator(request: Request) -> RequestCoordinator:
    """
    Get request coordinator.

    Args:
        request: FastAPI request

    Returns:
        Shared request coordinator
    """
    return get_app_state(request).coordinator


async def get_usage_tracker(request: Request) -> UsageTracker:
    """
    Get usage tracker.

    Args:
        request: FastAPI request

    Returns:
        Shared usage tracker
    """
    return get_app_state(request).usage_tracker


async def get_identity(request: Request) -> Optional[str]:
    """
    Read the caller identity supplied by the upstream auth layer.

    Args:
        request: FastAPI request

    Returns:
        Identity, or None if the header is missing or blank
    """
    identity = request.headers.get(config.identity_header, "").strip()
    return identity or None
