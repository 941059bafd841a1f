"""
Per-feature usage tracking.

Sandi Metz Principles:
- Single Responsibility: Track and report gateway outcomes
- Small methods: Each method < 10 lines
- Clear naming: Self-documenting code
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict

from ai_gateway.utils.logger import get_logger

logger = get_logger(__name__)

OUTCOMES = ("cached", "generated", "fallback", "failed")


@dataclass
class FeatureUsage:
    """Counters for one feature."""

    cached: int = 0
    generated: int = 0
    fallback: int = 0
    failed: int = 0
    tokens_used: int = 0
    tokens_saved: int = 0
    total_latency_ms: float = 0.0

    @property
    def total_requests(self) -> int:
        return self.cached + self.generated + self.fallback + self.failed

    @property
    def average_latency_ms(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.total_latency_ms / self.total_requests

    @property
    def hit_rate(self) -> float:
        """Share of requests served from cache."""
        if self.total_requests == 0:
            return 0.0
        return self.cached / self.total_requests

    def to_dict(self) -> Dict[str, float]:
        return {
            "cached": self.cached,
            "generated": self.generated,
            "fallback": self.fallback,
            "failed": self.failed,
            "totalRequests": self.total_requests,
            "tokensUsed": self.tokens_used,
            "tokensSaved": self.tokens_saved,
            "hitRate": round(self.hit_rate, 4),
            "averageLatencyMs": round(self.average_latency_ms, 2),
        }


@dataclass
class UsageSummary:
    """Summary across features."""

    since: datetime
    features: Dict[str, FeatureUsage] = field(default_factory=dict)

    @property
    def total_requests(self) -> int:
        return sum(u.total_requests for u in self.features.values())

    @property
    def tokens_used(self) -> int:
        return sum(u.tokens_used for u in self.features.values())

    @property
    def tokens_saved(self) -> int:
        return sum(u.tokens_saved for u in self.features.values())

    def to_dict(self) -> dict:
        return {
            "since": self.since.isoformat(),
            "totalRequests": self.total_requests,
            "tokensUsed": self.tokens_used,
            "tokensSaved": self.tokens_saved,
            "features": {name: u.to_dict() for name, u in self.features.items()},
        }


class UsageTracker:
    """
    Track gateway outcomes in-process.

    Records how each feature request resolved and how many upstream
    tokens were spent or saved by the cache.
    """

    def __init__(self):
        """Initialize usage tracker."""
        self._since = datetime.now(timezone.utc)
        self._features: Dict[str, FeatureUsage] = {}

    def record(
        self,
        feature: str,
        outcome: str,
        latency_ms: float = 0.0,
        tokens_used: int = 0,
        tokens_saved: int = 0,
    ) -> None:
        """
        Record one resolved request.

        Args:
            feature: Feature kind
            outcome: One of cached, generated, fallback, failed
            latency_ms: Request latency
            tokens_used: Upstream tokens spent
            tokens_saved: Upstream tokens avoided by a cache hit

        Raises:
            ValueError: If outcome is unknown
        """
        if outcome not in OUTCOMES:
            raise ValueError(f"Unknown outcome: {outcome}")

        usage = self._features.setdefault(feature, FeatureUsage())
        setattr(usage, outcome, getattr(usage, outcome) + 1)
        usage.tokens_used += tokens_used
        usage.tokens_saved += tokens_saved
        usage.total_latency_ms += latency_ms

        logger.debug(
            "Tracked request usage",
            feature=feature,
            outcome=outcome,
            tokens_used=tokens_used,
            tokens_saved=tokens_saved,
        )

    def get_feature(self, feature: str) -> FeatureUsage:
        """
        Get counters for one feature.

        Args:
            feature: Feature kind

        Returns:
            Feature usage (zeroed if never seen)
        """
        return self._features.get(feature, FeatureUsage())

    def get_summary(self) -> UsageSummary:
        """
        Get usage summary.

        Returns:
            Summary of all tracked requests
        """
        return UsageSummary(since=self._since, features=dict(self._features))

    def reset(self) -> None:
        """Clear all counters."""
        self._features.clear()
        self._since = datetime.now(timezone.utc)
        logger.info("Usage tracker reset")
