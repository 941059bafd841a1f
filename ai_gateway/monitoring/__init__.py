"""
Monitoring module.

In-process usage counters for the gateway.
"""

from ai_gateway.monitoring.usage_tracker import FeatureUsage, UsageSummary, UsageTracker

__all__ = ["FeatureUsage", "UsageSummary", "UsageTracker"]
