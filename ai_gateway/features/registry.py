"""
AI feature registry.

Sandi Metz Principles:
- Single Responsibility: Map feature kinds to their policies
- Open/Closed: Easy to add features
- Dependency Injection: TTLs come from configuration
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Type

from pydantic import ValidationError

from ai_gateway.config import GatewayConfig
from ai_gateway.exceptions import InvalidRequestError, UnknownFeatureError
from ai_gateway.features import prompts
from ai_gateway.features.schemas import (
    ATSScoreRequest,
    ATSScoreResult,
    BulletsRequest,
    BulletsResult,
    FeatureRequest,
    FeatureResult,
    JobMatchRequest,
    JobMatchResult,
    KeywordsRequest,
    KeywordsResult,
    SummaryRequest,
    SummaryResult,
)
from ai_gateway.models.llm import GenerationOptions
from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)


class FeatureKind(str, Enum):
    """AI-backed features served through the gateway."""

    ATS_SCORE = "ats-score"
    JOB_MATCH = "job-match"
    SUMMARY = "summary"
    BULLETS = "bullets"
    KEYWORDS = "keywords"


@dataclass(frozen=True)
class FeaturePolicy:
    """Everything the coordinator needs to serve one feature."""

    kind: FeatureKind
    request_model: Type[FeatureRequest]
    response_model: Type[FeatureResult]
    ttl_seconds: int
    options: GenerationOptions
    build_prompt: Callable[[Any], str]

    def parse_request(self, payload: Mapping[str, Any]) -> FeatureRequest:
        """
        Validate an inbound payload.

        Args:
            payload: Raw request payload

        Returns:
            Validated request model

        Raises:
            InvalidRequestError: If the payload is invalid
        """
        if isinstance(payload, self.request_model):
            return payload
        try:
            return self.request_model.model_validate(payload)
        except ValidationError as e:
            raise InvalidRequestError(
                f"Invalid {self.kind.value} request: {e.error_count()} error(s)"
            ) from e


class FeatureRegistry:
    """
    Registry of feature policies.

    Built once at startup and shared read-only.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._policies: Dict[FeatureKind, FeaturePolicy] = {}

    def register(self, policy: FeaturePolicy) -> None:
        """
        Register a feature policy.

        Args:
            policy: Policy to register
        """
        self._policies[policy.kind] = policy
        logger.debug("Registered feature", feature=policy.kind.value)

    def get(self, feature: "FeatureKind | str") -> FeaturePolicy:
        """
        Get policy for a feature.

        Args:
            feature: Feature kind or its string value

        Returns:
            Feature policy

        Raises:
            UnknownFeatureError: If feature is not registered
        """
        try:
            kind = FeatureKind(feature)
        except ValueError as e:
            raise UnknownFeatureError(f"Unknown feature: {feature}") from e

        policy = self._policies.get(kind)
        if policy is None:
            raise UnknownFeatureError(f"Feature not registered: {kind.value}")
        return policy

    def list_features(self) -> List[str]:
        """
        List registered feature names.

        Returns:
            Feature names
        """
        return [kind.value for kind in self._policies]


def build_default_registry(settings: GatewayConfig) -> FeatureRegistry:
    """
    Build the registry with every built-in feature.

    Args:
        settings: Gateway configuration (cache TTLs)

    Returns:
        Populated registry
    """
    content_ttl = settings.content_cache_ttl_seconds
    registry = FeatureRegistry()

    registry.register(
        FeaturePolicy(
            kind=FeatureKind.ATS_SCORE,
            request_model=ATSScoreRequest,
            response_model=ATSScoreResult,
            ttl_seconds=content_ttl,
            options=GenerationOptions(temperature=0.3, max_tokens=1500),
            build_prompt=prompts.build_ats_prompt,
        )
    )
    registry.register(
        FeaturePolicy(
            kind=FeatureKind.JOB_MATCH,
            request_model=JobMatchRequest,
            response_model=JobMatchResult,
            ttl_seconds=settings.matching_cache_ttl_seconds,
            options=GenerationOptions(temperature=0.35, max_tokens=2000),
            build_prompt=prompts.build_job_match_prompt,
        )
    )
    registry.register(
        FeaturePolicy(
            kind=FeatureKind.SUMMARY,
            request_model=SummaryRequest,
            response_model=SummaryResult,
            ttl_seconds=content_ttl,
            options=GenerationOptions(temperature=0.7, max_tokens=600),
            build_prompt=prompts.build_summary_prompt,
        )
    )
    registry.register(
        FeaturePolicy(
            kind=FeatureKind.BULLETS,
            request_model=BulletsRequest,
            response_model=BulletsResult,
            ttl_seconds=content_ttl,
            options=GenerationOptions(temperature=0.7, max_tokens=800),
            build_prompt=prompts.build_bullets_prompt,
        )
    )
    registry.register(
        FeaturePolicy(
            kind=FeatureKind.KEYWORDS,
            request_model=KeywordsRequest,
            response_model=KeywordsResult,
            ttl_seconds=content_ttl,
            options=GenerationOptions(temperature=0.3, max_tokens=800),
            build_prompt=prompts.build_keywords_prompt,
        )
    )

    return registry
