"""
LLM module.

Upstream providers, error classification, retry and response parsing.
"""

from ai_gateway.llm.error_classifier import ErrorClass, classify_error
from ai_gateway.llm.provider import BaseLLMProvider
from ai_gateway.llm.retry import RetryExecutor, RetryPolicy
from ai_gateway.llm.timeout_handler import Deadline

__all__ = [
    "BaseLLMProvider",
    "Deadline",
    "ErrorClass",
    "RetryExecutor",
    "RetryPolicy",
    "classify_error",
]
