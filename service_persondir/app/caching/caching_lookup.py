"""
Caching decorator for person attribute lookups.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional, Protocol, Set, TYPE_CHECKING, runtime_checkable

from shared.errors import ConfigurationError, ValidationError
from shared.logging import get_logger
from .key_builder import CacheKeyBuilder
from .stores import CacheStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


@runtime_checkable
class AttributeLookup(Protocol):
    """A service that resolves a query seed into an attribute record."""

    async def resolve(self, seed: Mapping) -> Mapping:
        ...

    async def possible_attribute_names(self) -> Set[str]:
        ...


class CacheStats:
    """Query and miss counters for one CachingLookup.

    Hits are not stored; they are ``queries - misses``.
    """

    def __init__(self):
        self._queries = 0
        self._misses = 0

    @property
    def queries(self) -> int:
        return self._queries

    @property
    def misses(self) -> int:
        return self._misses

    @property
    def hits(self) -> int:
        return self._queries - self._misses

    def record_hit(self) -> None:
        self._queries += 1

    def record_miss(self) -> None:
        self._queries += 1
        self._misses += 1

    def to_dict(self) -> Dict[str, int]:
        return {"queries": self.queries, "misses": self.misses, "hits": self.hits}

    def __repr__(self) -> str:
        return f"CacheStats(queries={self.queries}, hits={self.hits}, misses={self.misses})"


class CachingLookup:
    """
    Caches results of a wrapped attribute lookup.

    Results are stored in ``cache_store`` under keys built from the query
    seed by a CacheKeyBuilder. The store is used as-is: this class never
    evicts, expires or invalidates entries.

    No locking is done. Concurrent misses on the same key each call the
    wrapped lookup, and the counters carry no cross-call ordering.
    """

    def __init__(
        self,
        lookup: Optional[AttributeLookup] = None,
        cache_store: Optional[CacheStore] = None,
        *,
        cache_key_attributes: Optional[Iterable[str]] = None,
        default_attribute_name: Optional[str] = None,
        key_builder: Optional[CacheKeyBuilder] = None,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.logger = get_logger("persondir.cache.lookup")
        self._lookup = lookup
        self._cache_store = cache_store
        self.key_builder = key_builder or CacheKeyBuilder(
            cache_key_attributes=cache_key_attributes,
            default_attribute_name=default_attribute_name,
        )
        self.metrics = metrics
        self.stats = CacheStats()

    @property
    def lookup(self) -> Optional[AttributeLookup]:
        """The lookup cache misses are delegated to."""
        return self._lookup

    @lookup.setter
    def lookup(self, lookup: AttributeLookup) -> None:
        if lookup is None:
            raise ValidationError("lookup may not be None")
        self._lookup = lookup

    @property
    def cache_store(self) -> Optional[CacheStore]:
        return self._cache_store

    @cache_store.setter
    def cache_store(self, cache_store: CacheStore) -> None:
        if cache_store is None:
            raise ValidationError("cache_store may not be None")
        self._cache_store = cache_store

    async def resolve(self, seed: Mapping) -> Any:
        """
        Resolve a seed, serving repeat queries from the cache.

        Args:
            seed: Known attributes of the person, passed unchanged to the
                wrapped lookup on a miss.

        Returns:
            The attribute record, either cached or freshly resolved.

        Raises:
            ValidationError: ``seed`` is None.
            ConfigurationError: the lookup, the cache store or a usable key
                policy is missing.

        Anything the wrapped lookup raises propagates unchanged and nothing
        is cached for that query.
        """
        if seed is None:
            raise ValidationError("The query seed may not be None")
        if self._lookup is None:
            raise ConfigurationError("No 'lookup' has been configured")
        if self._cache_store is None:
            raise ConfigurationError("No 'cache_store' has been configured")

        cache_key = self.key_builder.derive_key(seed)

        if cache_key is None:
            self.logger.warning(
                "No cache key generated, caching disabled for this query",
                seed=dict(seed),
                cache_key_attributes=self.key_builder.cache_key_attributes,
                default_attribute_name=self.key_builder.default_attribute_name,
            )
            self.stats.record_miss()
            self._record_result("bypass")
            return await self._delegate(seed)

        cached = await self._cache_store.get(cache_key)
        if cached is not None:
            self.stats.record_hit()
            self._record_result("hit")
            self.logger.debug("Retrieved query from cache", cache_key=repr(cache_key), **self.stats.to_dict())
            return cached

        record = await self._delegate(seed)
        await self._cache_store.put(cache_key, record)

        self.stats.record_miss()
        self._record_result("miss")
        self.logger.debug(
            "Retrieved query from wrapped lookup and stored in cache",
            cache_key=repr(cache_key),
            **self.stats.to_dict()
        )
        return record

    async def possible_attribute_names(self) -> Set[str]:
        """Attribute names the wrapped lookup can return. Not cached."""
        if self._lookup is None:
            raise ConfigurationError("No 'lookup' has been configured")
        return await self._lookup.possible_attribute_names()

    async def _delegate(self, seed: Mapping) -> Any:
        if not self.metrics:
            return await self._lookup.resolve(seed)
        with self.metrics.time_operation("attribute_lookup_duration_seconds"):
            return await self._lookup.resolve(seed)

    def _record_result(self, result: str) -> None:
        if not self.metrics:
            return
        self.metrics.increment_counter("attribute_cache_requests_total", result=result)
