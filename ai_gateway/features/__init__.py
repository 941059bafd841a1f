"""
Features module.

Per-feature request/response schemas, prompts and policies.
"""

from ai_gateway.features.registry import (
    FeatureKind,
    FeaturePolicy,
    FeatureRegistry,
    build_default_registry,
)

__all__ = [
    "FeatureKind",
    "FeaturePolicy",
    "FeatureRegistry",
    "build_default_registry",
]
