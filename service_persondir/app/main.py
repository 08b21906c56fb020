"""
Person Directory service: a caching front for person attribute lookups.
"""

from contextlib import asynccontextmanager
from typing import Dict, Optional

from shared.base_service import BaseService
from shared.config import PersonDirectoryConfig, get_persondir_config

from .adapters import DirectoryClient
from .caching import AttributeLookup, CachingLookup, CacheStore, InMemoryCacheStore, RedisCacheStore
from .models import AttributeNamesResponse, CacheStatsResponse, ResolveRequest, ResolveResponse


class PersonDirectoryService(BaseService):
    """Person directory service implementation."""

    def __init__(
        self,
        config: Optional[PersonDirectoryConfig] = None,
        *,
        lookup: Optional[AttributeLookup] = None,
        cache_store: Optional[CacheStore] = None,
    ):
        config = config or get_persondir_config()
        super().__init__("persondir", config.port, config=config)

        self.lookup = lookup or DirectoryClient(
            config.directory_service_url,
            timeout=config.directory_timeout_seconds,
            case_insensitive=config.case_insensitive_attributes,
            name_attribute=config.default_attribute_name,
        )
        self.cache_store = cache_store or self._create_cache_store(config)

        self.caching_lookup = CachingLookup(
            self.lookup,
            self.cache_store,
            cache_key_attributes=config.cache_key_attributes,
            default_attribute_name=config.default_attribute_name,
            metrics=self.metrics,
        )

        self.app.router.lifespan_context = self._lifespan
        self._setup_persondir_routes()

    @staticmethod
    def _create_cache_store(config: PersonDirectoryConfig) -> CacheStore:
        if config.cache_backend == "redis":
            return RedisCacheStore(config.redis_url, ttl_seconds=config.cache_ttl_seconds)
        return InMemoryCacheStore()

    @asynccontextmanager
    async def _lifespan(self, app):
        if isinstance(self.cache_store, RedisCacheStore):
            await self.cache_store.start()
        self.logger.info(
            "Person directory service started",
            cache_store=type(self.cache_store).__name__,
            cache_key_attributes=self.caching_lookup.key_builder.cache_key_attributes,
            default_attribute_name=self.caching_lookup.key_builder.default_attribute_name,
        )
        try:
            yield
        finally:
            if isinstance(self.cache_store, RedisCacheStore):
                await self.cache_store.stop()
            self.logger.info("Person directory service stopped", **self.caching_lookup.stats.to_dict())

    def _setup_persondir_routes(self):
        """Set up person directory routes."""

        @self.app.get("/")
        async def root():
            return {
                "service": "persondir",
                "message": "Person Directory - caching attribute lookup",
                "version": "1.0.0",
                "capabilities": ["attribute_lookup", "caching"]
            }

        @self.app.post("/attributes/resolve", response_model=ResolveResponse)
        async def resolve_attributes(request: ResolveRequest):
            """Resolve a seed into a person attribute record."""
            record = await self.caching_lookup.resolve(request.seed)
            if hasattr(record, "to_dict"):
                attributes = record.to_dict()
            else:
                attributes = {name: list(values) for name, values in record.items()}
            return ResolveResponse(attributes=attributes)

        @self.app.get("/attributes/names", response_model=AttributeNamesResponse)
        async def possible_attribute_names():
            names = await self.caching_lookup.possible_attribute_names()
            return AttributeNamesResponse(names=sorted(names))

        @self.app.get("/cache/stats", response_model=CacheStatsResponse)
        async def cache_stats():
            return CacheStatsResponse(**self.caching_lookup.stats.to_dict())

    async def _check_dependencies(self) -> Dict[str, str]:
        dependencies = {}
        for name, component in (("cache_store", self.cache_store), ("directory_service", self.lookup)):
            health_check = getattr(component, "health_check", None)
            if health_check is not None:
                dependencies[name] = "ok" if await health_check() else "error"
        return dependencies


def create_app(config: Optional[PersonDirectoryConfig] = None):
    """Create person directory service application."""
    service = PersonDirectoryService(config)
    return service.app


if __name__ == "__main__":
    service = PersonDirectoryService()
    service.run()
