"""
Structured logging configuration.

Following Sandi Metz principles:
- Single Responsibility: Logging setup and configuration
- Small functions: Each setup step isolated
- Clear naming: Descriptive function names
"""

import logging
import sys
from typing import Any

import structlog


def setup_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """
    Configure structured logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render one JSON object per line instead of console text
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structured logger
    """
    return structlog.get_logger(name)


def log_cache_hit(feature: str, key: str, **kwargs: Any) -> None:
    """
    Log cache hit.

    Args:
        feature: Feature kind
        key: Cache key
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.info("cache_hit", feature=feature, key=key, **kwargs)


def log_cache_miss(feature: str, key: str, **kwargs: Any) -> None:
    """
    Log cache miss.

    Args:
        feature: Feature kind
        key: Cache key
        **kwargs: Additional context
    """
    logger = get_logger("cache")
    logger.info("cache_miss", feature=feature, key=key, **kwargs)


def log_llm_call(provider: str, model: str, tokens: int, **kwargs: Any) -> None:
    """
    Log upstream LLM call.

    Args:
        provider: LLM provider name
        model: Model name
        tokens: Total tokens used
        **kwargs: Additional context
    """
    logger = get_logger("llm")
    logger.info("llm_call", provider=provider, model=model, tokens=tokens, **kwargs)


def log_fallback(feature: str, reason: str, **kwargs: Any) -> None:
    """
    Log degraded (fallback) response.

    Args:
        feature: Feature kind
        reason: Why the fallback was used
        **kwargs: Additional context
    """
    logger = get_logger("fallback")
    logger.warning("fallback_used", feature=feature, reason=reason, **kwargs)


def log_error(error: Exception, context: str, **kwargs: Any) -> None:
    """
    Log error with context.

    Args:
        error: Exception that occurred
        context: Error context
        **kwargs: Additional context
    """
    logger = get_logger("error")
    logger.error(
        "error_occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context,
        **kwargs,
    )
