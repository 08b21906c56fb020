"""
Attribute lookup caching package.

Wraps a person attribute lookup with a get-or-populate cache keyed on a
configurable subset of seed attributes. Stores are pluggable; eviction and
expiry are left entirely to them.
"""

from .key_builder import CacheKey, CacheKeyBuilder
from .stores import CacheStore, InMemoryCacheStore, RedisCacheStore
from .caching_lookup import AttributeLookup, CacheStats, CachingLookup

__all__ = [
    "AttributeLookup",
    "CacheKey",
    "CacheKeyBuilder",
    "CacheStats",
    "CacheStore",
    "CachingLookup",
    "InMemoryCacheStore",
    "RedisCacheStore",
]
