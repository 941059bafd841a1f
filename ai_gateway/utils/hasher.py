"""
Cache key generation utilities.

Sandi Metz Principles:
- Single Responsibility: Hash generation
- Small functions: Each does one thing
- Pure functions: No side effects
"""

import hashlib
import json
from typing import Any

CACHE_KEY_LENGTH = 16
CACHE_KEY_PREFIX = "ai:"


def normalize_text(value: str) -> str:
    """
    Normalize free text for comparison.

    Args:
        value: Text value

    Returns:
        Trimmed text with whitespace runs collapsed to one space
    """
    return " ".join(value.split())


def _normalize_value(value: Any) -> Any:
    """Recursively normalize strings inside a JSON-like value."""
    if isinstance(value, str):
        return normalize_text(value)
    if isinstance(value, dict):
        return {str(k): _normalize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]
    return value


def canonical_json(payload: Any) -> str:
    """
    Serialize payload into a stable JSON string.

    Key order and formatting whitespace never affect the output.

    Args:
        payload: JSON-compatible value

    Returns:
        Canonical JSON text
    """
    return json.dumps(
        _normalize_value(payload),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )


def derive_cache_key(feature: str, payload: Any) -> str:
    """
    Derive the content-addressed key for a request.

    Args:
        feature: Endpoint identity (feature kind)
        payload: Request payload

    Returns:
        Fixed-length hex key
    """
    material = f"{feature}\n{canonical_json(payload)}"
    digest = hashlib.sha256(material.encode("utf-8")).hexdigest()
    return digest[:CACHE_KEY_LENGTH]


def storage_key(key: str) -> str:
    """
    Build backing store key for a cache key.

    Args:
        key: Cache key

    Returns:
        Namespaced storage key
    """
    return f"{CACHE_KEY_PREFIX}{key}"
