"""
Cache module.

Content-addressed cache stores for validated upstream results.
"""

from ai_gateway.cache.cache_store import CacheStore, InMemoryCacheStore, RedisCacheStore

__all__ = ["CacheStore", "InMemoryCacheStore", "RedisCacheStore"]
