"""
Bookmarks service wiring.

Builds the cache backend and the cached bookmark service from configuration.
HTTP routing lives outside this package; callers hold on to the returned
``BookmarkServiceContainer`` for the lifetime of the process.
"""

from dataclasses import dataclass
from typing import Optional

from shared.config import ServiceConfig, get_config
from shared.errors import ValidationError
from shared.logging import configure_logging, get_logger
from .bookmarks.cached_service import CachedBookmarkService
from .bookmarks.repository import BookmarkRepository, InMemoryBookmarkRepository
from .bookmarks.service import DefaultBookmarkService
from .cache.base import CacheStore
from .cache.memory_cache import InMemoryCacheStore
from .cache.redis_cache import RedisCacheStore

SERVICE_NAME = "bookmarks"

logger = get_logger("bookmarks.main")


def create_cache_store(config: ServiceConfig) -> CacheStore:
    """Pick the cache backend named by ``config.cache_backend``."""
    backend = config.cache_backend.lower()
    if backend == "redis":
        return RedisCacheStore(config.redis_url)
    if backend == "memory":
        return InMemoryCacheStore()
    raise ValidationError(
        f"Unknown cache backend: {config.cache_backend}",
        {"cache_backend": config.cache_backend}
    )


@dataclass
class BookmarkServiceContainer:
    """Long-lived service objects and their lifecycle."""
    config: ServiceConfig
    cache: CacheStore
    service: CachedBookmarkService

    async def start(self) -> None:
        if isinstance(self.cache, RedisCacheStore):
            await self.cache.start()
        logger.info("Bookmarks service started", cache_backend=self.config.cache_backend)

    async def stop(self) -> None:
        await self.service.drain()
        if isinstance(self.cache, RedisCacheStore):
            await self.cache.stop()
        logger.info("Bookmarks service stopped")


def create_bookmark_service(
    config: Optional[ServiceConfig] = None,
    repository: Optional[BookmarkRepository] = None,
    cache: Optional[CacheStore] = None,
) -> BookmarkServiceContainer:
    """Build the default bookmark service behind the list cache."""
    config = config or get_config(SERVICE_NAME)
    configure_logging(SERVICE_NAME, config.log_level)

    cache = cache or create_cache_store(config)
    base_service = DefaultBookmarkService(
        repository or InMemoryBookmarkRepository(),
        code_length=config.code_length,
        code_max_attempts=config.code_max_attempts,
    )
    service = CachedBookmarkService(
        base_service,
        cache,
        ttl_seconds=config.bookmark_cache_ttl_seconds,
        write_timeout_seconds=config.cache_write_timeout_seconds,
    )
    return BookmarkServiceContainer(config=config, cache=cache, service=service)
