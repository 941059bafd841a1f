"""
Health check endpoints.

Sandi Metz Principles:
- Single Responsibility: Health check logic only
- Small functions: Each check isolated
- Clear naming: Descriptive endpoint names
"""

import time
from typing import Dict, Literal, Optional

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from ai_gateway.config import config
from ai_gateway.models.response import HealthResponse
from ai_gateway.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


class ComponentHealth(BaseModel):
    """Health status of a component."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Component status"
    )
    latency_ms: Optional[float] = Field(None, description="Check latency in ms")
    message: Optional[str] = Field(None, description="Status message")


class DetailedHealthResponse(BaseModel):
    """Detailed health check response."""

    status: Literal["healthy", "unhealthy", "degraded"] = Field(
        ..., description="Overall status"
    )
    environment: str = Field(..., description="Environment name")
    version: str = Field(..., description="Application version")
    components: Dict[str, ComponentHealth] = Field(
        default_factory=dict, description="Component health status"
    )


async def check_cache_health(request: Request) -> ComponentHealth:
    """
    Check cache store health.

    A failing cache only degrades the gateway, since reads fall back to
    misses.
    """
    if not hasattr(request.app.state, "app_state"):
        return ComponentHealth(status="unhealthy", message="App state not initialized")

    cache = request.app.state.app_state.cache
    if cache is None:
        return ComponentHealth(status="unhealthy", message="Cache not initialized")

    start = time.time()
    is_healthy = await cache.health_check()
    latency = (time.time() - start) * 1000

    if is_healthy:
        return ComponentHealth(status="healthy", latency_ms=round(latency, 2))
    logger.warning("Cache health check failed")
    return ComponentHealth(status="degraded", message="Cache unreachable")


def check_provider_health(request: Request) -> ComponentHealth:
    """Check that an upstream provider is configured."""
    if not hasattr(request.app.state, "app_state"):
        return ComponentHealth(status="unhealthy", message="App state not initialized")

    provider = request.app.state.app_state.llm_provider
    if provider is None:
        return ComponentHealth(status="unhealthy", message="No LLM provider")
    return ComponentHealth(status="healthy", message=provider.get_name())


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Health status response
    """
    return HealthResponse(
        status="healthy",
        environment=config.app_env,
        version=config.app_version,
    )


@router.get("/ready", response_model=DetailedHealthResponse)
async def readiness_check(request: Request) -> DetailedHealthResponse:
    """
    Readiness check endpoint.

    Checks dependencies and returns detailed status.

    Returns:
        Detailed health status response
    """
    components = {
        "cache": await check_cache_health(request),
        "llm": check_provider_health(request),
    }

    statuses = [c.status for c in components.values()]
    if all(s == "healthy" for s in statuses):
        overall_status = "healthy"
    elif any(s == "unhealthy" for s in statuses):
        overall_status = "unhealthy"
    else:
        overall_status = "degraded"

    return DetailedHealthResponse(
        status=overall_status,
        environment=config.app_env,
        version=config.app_version,
        components=components,
    )
