"""
Usage metrics endpoint.

Sandi Metz Principles:
- Single Responsibility: Metrics exposure
- Observable: Per-feature outcomes and token savings
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ai_gateway.api.deps import get_usage_tracker
from ai_gateway.config import config
from ai_gateway.monitoring.usage_tracker import UsageTracker

router = APIRouter()


@router.get("/metrics/usage")
async def get_usage(
    tracker: UsageTracker = Depends(get_usage_tracker),  # noqa: B008
) -> Dict[str, Any]:
    """
    Get gateway usage metrics.

    Returns:
        Per-feature outcome counters and token totals
    """
    return {
        "application": {
            "name": config.app_name,
            "environment": config.app_env,
            "version": config.app_version,
        },
        "usage": tracker.get_summary().to_dict(),
        "config": {
            "redisEnabled": config.redis_enabled,
            "rateLimitPerMinute": config.ai_rate_limit_per_minute,
            "rateLimitFailOpen": config.rate_limit_fail_open,
            "singleFlightEnabled": config.enable_single_flight,
            "contentCacheTtlSeconds": config.content_cache_ttl_seconds,
            "matchingCacheTtlSeconds": config.matching_cache_ttl_seconds,
        },
    }
