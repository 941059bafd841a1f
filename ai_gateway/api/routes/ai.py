"""
AI feature endpoint.

Sandi Metz Principles:
- Single Responsibility: HTTP request handling
- Small functions: Minimal logic in endpoints
- Dependency Injection: Coordinator injected
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from ai_gateway.api.deps import get_coordinator, get_identity
from ai_gateway.config import config
from ai_gateway.exceptions import (
    DeadlineExceededError,
    InvalidRequestError,
    RateLimitedError,
    UnknownFeatureError,
    UpstreamExhaustedError,
    UpstreamFatalError,
    ValidationFailedError,
)
from ai_gateway.models.error import ErrorResponse
from ai_gateway.services.request_coordinator import RequestCoordinator
from ai_gateway.utils.logger import get_logger, log_error

router = APIRouter()
logger = get_logger(__name__)


def error_response(
    status_code: int, error: ErrorResponse, headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    """
    Render an error body.

    Args:
        status_code: HTTP status
        error: Error model
        headers: Optional extra headers

    Returns:
        JSON response
    """
    return JSONResponse(
        status_code=status_code,
        content=error.model_dump(mode="json", exclude_none=True),
        headers=headers,
    )


def rate_limited_response(error: RateLimitedError) -> JSONResponse:
    """Render a 429 with Retry-After and rate-limit headers."""
    if error.decision is not None:
        headers = error.decision.as_headers()
    else:
        headers = {"Retry-After": str(error.retry_after)}
    return error_response(
        429, ErrorResponse.rate_limit_exceeded(error.retry_after), headers
    )


@router.post("/ai/{feature}")
async def run_feature(
    feature: str,
    payload: Dict[str, Any] = Body(...),  # noqa: B008
    identity: Optional[str] = Depends(get_identity),  # noqa: B008
    coordinator: RequestCoordinator = Depends(get_coordinator),  # noqa: B008
) -> JSONResponse:
    """
    Run an AI feature through the gateway.

    Args:
        feature: Feature kind (e.g. "ats-score")
        payload: Feature request body
        identity: Caller identity (injected from header)
        coordinator: Request coordinator (injected)

    Returns:
        Feature response body with cache and rate-limit headers
    """
    if identity is None:
        return error_response(401, ErrorResponse.unauthorized(config.identity_header))

    try:
        result = await coordinator.handle(feature, identity, payload)
    except UnknownFeatureError:
        return error_response(404, ErrorResponse.unknown_feature(feature))
    except InvalidRequestError as e:
        return error_response(422, ErrorResponse.invalid_request(str(e)))
    except RateLimitedError as e:
        return rate_limited_response(e)
    except UpstreamExhaustedError as e:
        logger.error("Upstream retries exhausted", feature=feature, attempts=e.attempts)
        return error_response(503, ErrorResponse.upstream_exhausted(e.attempts))
    except UpstreamFatalError as e:
        logger.error("Upstream fatal error", feature=feature, status=e.status)
        return error_response(502, ErrorResponse.upstream_error())
    except ValidationFailedError:
        return error_response(502, ErrorResponse.validation_failed())
    except DeadlineExceededError:
        return error_response(504, ErrorResponse.deadline_exceeded())
    except Exception as e:
        log_error(e, "ai feature request", feature=feature)
        return error_response(500, ErrorResponse.internal_error())

    return JSONResponse(content=result.body, headers=result.metadata_headers())
