"""
LLM response parser.

Sandi Metz Principles:
- Single Responsibility: Turn upstream text into validated feature results
- Small methods: Each method < 10 lines
- Clear naming: Self-documenting code

Models often wrap JSON in markdown fences or surround it with prose, so
the first balanced JSON value is extracted before validation.
"""

import json
import re
from typing import Any, Optional, Type, TypeVar

from pydantic import ValidationError

from ai_gateway.exceptions import ValidationFailedError
from ai_gateway.features.schemas import FeatureResult
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)

R = TypeVar("R", bound=FeatureResult)

_FENCE_PATTERN = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_RAW_LOG_LIMIT = 2000


class LLMResponseParser:
    """
    Parser for upstream text responses.

    Converts model output into a feature result model or raises
    ValidationFailedError carrying the raw text.
    """

    @staticmethod
    def parse(text: str, schema: Type[R]) -> R:
        """
        Parse and validate upstream text.

        Args:
            text: Raw upstream text
            schema: Feature result model

        Returns:
            Validated feature result

        Raises:
            ValidationFailedError: If text is not valid JSON for the schema
        """
        data = LLMResponseParser.parse_json(text)

        try:
            result = schema.model_validate(data)
        except ValidationError as e:
            LLMResponseParser._log_failure("Schema validation failed", text, str(e))
            raise ValidationFailedError(
                f"Upstream response does not match {schema.__name__}", raw=text
            ) from e

        if not result.has_content():
            LLMResponseParser._log_failure("Upstream response has no content", text)
            raise ValidationFailedError("Upstream response has no content", raw=text)

        return result

    @staticmethod
    def parse_json(text: str) -> Any:
        """
        Extract and decode the JSON value in upstream text.

        Args:
            text: Raw upstream text

        Returns:
            Decoded JSON value

        Raises:
            ValidationFailedError: If no JSON value can be decoded
        """
        candidate = LLMResponseParser.extract_json(text or "")
        if candidate is None:
            LLMResponseParser._log_failure("No JSON found in upstream response", text)
            raise ValidationFailedError("No JSON found in upstream response", raw=text)

        try:
            return json.loads(candidate)
        except json.JSONDecodeError as e:
            LLMResponseParser._log_failure("Invalid JSON in upstream response", text, str(e))
            raise ValidationFailedError(
                "Invalid JSON in upstream response", raw=text
            ) from e

    @staticmethod
    def extract_json(text: str) -> Optional[str]:
        """
        Find the first balanced JSON object or array.

        Args:
            text: Text possibly containing JSON

        Returns:
            JSON substring, or None if there is none
        """
        body = LLMResponseParser.strip_fences(text)
        start = LLMResponseParser._first_container(body)
        if start is None:
            return None
        end = LLMResponseParser._matching_close(body, start)
        if end is None:
            return None
        return body[start : end + 1]

    @staticmethod
    def strip_fences(text: str) -> str:
        """
        Remove markdown code fences.

        Args:
            text: Raw text

        Returns:
            Fenced content if present, otherwise the stripped text
        """
        match = _FENCE_PATTERN.search(text)
        if match:
            return match.group(1).strip()
        return text.strip()

    @staticmethod
    def _first_container(text: str) -> Optional[int]:
        """Index of the first '{' or '['."""
        positions = [i for i in (text.find("{"), text.find("[")) if i != -1]
        return min(positions) if positions else None

    @staticmethod
    def _matching_close(text: str, start: int) -> Optional[int]:
        """Index of the bracket closing the one at start, string-aware."""
        depth = 0
        in_string = False
        escaped = False

        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char in "{[":
                depth += 1
            elif char in "}]":
                depth -= 1
                if depth == 0:
                    return index

        return None

    @staticmethod
    def _log_failure(message: str, raw: str, error: str = "") -> None:
        """Log a parse failure with the raw payload for diagnosis."""
        logger.error(
            message,
            error=error,
            raw=(raw or "")[:_RAW_LOG_LIMIT],
            raw_length=len(raw or ""),
        )
