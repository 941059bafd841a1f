"""
Upstream error classification.

Every upstream failure is sorted into exactly one class in one place,
so retry, fallback and error reporting agree on what happened.
"""

import asyncio
from enum import Enum
from typing import FrozenSet, Iterable

from ai_gateway.exceptions import UpstreamError

DEFAULT_RETRYABLE_STATUSES: FrozenSet[int] = frozenset({429, 503})


class ErrorClass(str, Enum):
    """How an upstream failure should be handled."""

    TRANSIENT = "transient"
    QUOTA_EXCEEDED = "quota_exceeded"
    FATAL = "fatal"


def classify_error(
    error: BaseException,
    retryable_statuses: Iterable[int] = DEFAULT_RETRYABLE_STATUSES,
) -> ErrorClass:
    """
    Classify an upstream failure.

    Quota exhaustion wins over status: a 429 that reports an exhausted
    quota is never retried.

    Args:
        error: Exception raised by an upstream attempt
        retryable_statuses: Status codes treated as transient

    Returns:
        Error class
    """
    if isinstance(error, asyncio.TimeoutError):
        return ErrorClass.TRANSIENT

    if not isinstance(error, UpstreamError):
        return ErrorClass.FATAL

    if error.is_quota_error:
        return ErrorClass.QUOTA_EXCEEDED

    if error.is_transport_error:
        return ErrorClass.TRANSIENT

    if error.status is not None and error.status in set(retryable_statuses):
        return ErrorClass.TRANSIENT

    return ErrorClass.FATAL
