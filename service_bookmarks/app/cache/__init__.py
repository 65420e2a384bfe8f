"""
Cache package for the Bookmarks Service.

Provides the grouped cache contract used by the bookmark list cache and two
backends: Redis hashes for deployments and an in-process store for local
development and tests.
"""

from .base import CacheStore
from .memory_cache import InMemoryCacheStore
from .redis_cache import RedisCacheStore

__all__ = ["CacheStore", "InMemoryCacheStore", "RedisCacheStore"]
