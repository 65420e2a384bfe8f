"""
Redis-backed grouped cache.

Each group is a Redis hash: the group key is the hash key and each entry is
a hash field, so one ``EXPIRE`` governs the group and one ``DEL`` drops it.
"""

from typing import Optional

import redis.asyncio as redis
from shared.logging import get_logger
from shared.errors import CacheError, CacheMissError
from .base import CacheStore


class RedisCacheStore(CacheStore):
    """Grouped cache on Redis hashes."""

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.logger = get_logger("bookmarks.cache.redis")
        self.redis: Optional[redis.Redis] = client

    async def start(self):
        """Connect to Redis and verify the connection."""
        try:
            if self.redis is None:
                self.redis = redis.from_url(
                    self.redis_url,
                    socket_connect_timeout=5,
                    socket_timeout=5,
                    retry_on_timeout=True,
                    health_check_interval=30
                )

            await self.redis.ping()

            self.logger.info("Redis cache started")

        except Exception as e:
            self.logger.error("Failed to start Redis cache", error=str(e))
            raise CacheError("REDIS_START_FAILED", str(e))

    async def stop(self):
        """Close the Redis connection."""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            self.logger.info("Redis cache stopped")

    def _client(self) -> redis.Redis:
        if self.redis is None:
            raise CacheError("REDIS_NOT_STARTED", "Redis cache has not been started")
        return self.redis

    async def set(self, group_key: str, entry_key: str, value: bytes, ttl_seconds: float) -> None:
        # MULTI/EXEC so a new hash never exists without its expiry
        async with self._client().pipeline(transaction=True) as pipe:
            pipe.hset(group_key, entry_key, value)
            # Expiry applies to the whole hash and restarts on every write
            pipe.expire(group_key, max(1, int(ttl_seconds)))
            await pipe.execute()

    async def get(self, group_key: str, entry_key: str) -> bytes:
        value = await self._client().hget(group_key, entry_key)
        if value is None:
            raise CacheMissError(group_key, entry_key)
        if isinstance(value, str):
            return value.encode("utf-8")
        return value

    async def delete(self, group_key: str) -> None:
        await self._client().delete(group_key)

    async def health_check(self) -> bool:
        """Check Redis health."""
        try:
            await self._client().ping()
            return True
        except Exception:
            return False
