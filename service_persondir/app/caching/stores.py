"""
Cache stores backing the attribute lookup cache.

Stores own their consistency, eviction and expiry policy. The caching
decorator only ever calls ``get`` and ``put``.
"""

import hashlib
import json
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.errors import ServiceError
from shared.logging import get_logger
from ..attributes import AttributeRecord, CaseInsensitiveAttributeRecord
from .key_builder import CacheKey


@runtime_checkable
class CacheStore(Protocol):
    """Key-value container the caching decorator reads and writes."""

    async def get(self, key: CacheKey) -> Optional[AttributeRecord]:
        ...

    async def put(self, key: CacheKey, record: AttributeRecord) -> None:
        ...


class InMemoryCacheStore:
    """Process-local dict store. Never evicts."""

    def __init__(self):
        self._entries: Dict[CacheKey, AttributeRecord] = {}

    async def get(self, key: CacheKey) -> Optional[AttributeRecord]:
        return self._entries.get(key)

    async def put(self, key: CacheKey, record: AttributeRecord) -> None:
        self._entries[key] = record

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    async def health_check(self) -> bool:
        return True


class RedisCacheStore:
    """Redis-backed store for attribute records."""

    KEY_PREFIX = "persondir:"

    def __init__(self, redis_url: str, ttl_seconds: Optional[int] = None):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.logger = get_logger("persondir.cache.redis")
        self.redis: Optional[redis.Redis] = None

    async def start(self):
        """Connect to Redis."""
        try:
            self.redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30
            )
            await self.redis.ping()
            self.logger.info("Redis cache store started", ttl_seconds=self.ttl_seconds)

        except Exception as e:
            self.logger.error("Failed to start Redis cache store", error=str(e))
            raise ServiceError("Failed to start Redis cache store", details={"error": str(e)})

    async def stop(self):
        """Close the Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache store stopped")

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise ServiceError("Redis cache store is not started")
        return self.redis

    def _make_key(self, key: CacheKey) -> str:
        """Render a cache key as a Redis key, independent of entry order."""
        key_string = json.dumps(dict(key), sort_keys=True, default=str)
        return f"{self.KEY_PREFIX}{hashlib.sha256(key_string.encode()).hexdigest()}"

    async def get(self, key: CacheKey) -> Optional[AttributeRecord]:
        redis_key = self._make_key(key)
        try:
            cached_data = await self._client().get(redis_key)
        except RedisError as e:
            self.logger.error("Cache get error", redis_key=redis_key, error=str(e))
            raise ServiceError("Cache read failed", details={"error": str(e)})

        if cached_data is None:
            return None

        return self._deserialize(cached_data)

    async def put(self, key: CacheKey, record: AttributeRecord) -> None:
        redis_key = self._make_key(key)
        payload = json.dumps(self._serialize(record), default=str)
        try:
            if self.ttl_seconds:
                await self._client().setex(redis_key, self.ttl_seconds, payload)
            else:
                await self._client().set(redis_key, payload)
        except RedisError as e:
            self.logger.error("Cache set error", redis_key=redis_key, error=str(e))
            raise ServiceError("Cache write failed", details={"error": str(e)})

        self.logger.debug("Cached attribute record", redis_key=redis_key, ttl=self.ttl_seconds)

    @staticmethod
    def _serialize(record: Any) -> Dict[str, Any]:
        if hasattr(record, "to_dict"):
            attributes = record.to_dict()
        else:
            attributes = AttributeRecord(record).to_dict()
        return {
            "attributes": attributes,
            "name_attribute": getattr(record, "name_attribute", None),
            "case_insensitive": isinstance(record, CaseInsensitiveAttributeRecord),
        }

    def _deserialize(self, cached_data: str) -> Optional[AttributeRecord]:
        try:
            data = json.loads(cached_data)
        except (TypeError, json.JSONDecodeError):
            self.logger.warning("Failed to deserialize cached attribute record")
            return None
        record = AttributeRecord(data.get("attributes"), name_attribute=data.get("name_attribute"))
        if data.get("case_insensitive"):
            return CaseInsensitiveAttributeRecord(record)
        return record

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._client().ping()
            return True
        except (ServiceError, RedisError):
            return False
