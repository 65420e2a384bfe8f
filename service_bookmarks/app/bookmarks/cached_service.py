"""
Read-through cache in front of a ``BookmarkService``.

Reads are cache-aside: look up the owner's page in the cache, fall back to
the wrapped service on a miss, then write the fresh page back. Writes are
write-invalidate: mutate through the wrapped service, then drop every cached
page of that owner.

Consistency model
-----------------
The wrapped service is the source of truth and is always called before any
invalidation. The cache is best-effort:

* A failed cache read, an unreadable payload, a failed write-back and a
  failed invalidation are all logged and never reach the caller. Callers see
  the same results and errors whether or not the cache is healthy.
* If an invalidation fails silently, the owner's pages may be stale until the
  group TTL runs out.
* A reader that fetched from the source before a concurrent write committed
  can finish its write-back after that write's invalidation and repopulate
  the group with the older page. Nothing here fences that race; the TTL
  bounds it. Closing it would need a per-owner version stamped into the
  cache key or value and checked on read.

Write-back runs on its own task with its own timeout, so a caller that is
cancelled or has a short deadline can neither wedge nor be delayed by it.
"""

import asyncio
from typing import Optional, Set

from shared.errors import CacheMissError, ValidationError
from shared.logging import get_logger, set_owner_context
from ..cache.base import CacheStore
from ..pagination import PageRequest, PagedResult
from .models import Bookmark
from .service import BookmarkService

GROUP_KEY_FORMAT = "get_bookmarks_{owner_id}"
ENTRY_KEY_FORMAT = "{page}_{limit}"

DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60
DEFAULT_WRITE_TIMEOUT_SECONDS = 2.0


def group_key(owner_id: str) -> str:
    """Cache group holding every cached page of one owner."""
    return GROUP_KEY_FORMAT.format(owner_id=owner_id)


def entry_key(page_request: PageRequest) -> str:
    """Cache entry for one sanitized (page, limit) pair."""
    page_request.sanitize()
    return ENTRY_KEY_FORMAT.format(page=page_request.page, limit=page_request.limit)


class CachedBookmarkService(BookmarkService):
    """``BookmarkService`` decorator adding a per-owner page cache."""

    def __init__(
        self,
        service: BookmarkService,
        cache: CacheStore,
        *,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        write_timeout_seconds: float = DEFAULT_WRITE_TIMEOUT_SECONDS,
    ):
        self.service = service
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.write_timeout_seconds = write_timeout_seconds
        self.logger = get_logger("bookmarks.cached_service")
        self._pending_writes: Set[asyncio.Task] = set()

    async def create_bookmark(self, owner_id: str, description: str, url: str) -> Bookmark:
        set_owner_context(owner_id)
        bookmark = await self.service.create_bookmark(owner_id, description, url)
        await self._invalidate(owner_id, "create")
        return bookmark

    async def list_bookmarks(self, owner_id: str, page_request: Optional[PageRequest]) -> PagedResult[Bookmark]:
        set_owner_context(owner_id)
        if page_request is None:
            raise ValidationError("page request cannot be None")

        page_request.sanitize()
        group = group_key(owner_id)
        entry = entry_key(page_request)

        cached = await self._read_cached_page(group, entry)
        if cached is not None:
            return cached

        result = await self.service.list_bookmarks(owner_id, page_request)

        self._schedule_write_back(group, entry, result)
        return result

    async def update_bookmark(self, bookmark_id: str, owner_id: str, description: str, url: str) -> None:
        set_owner_context(owner_id)
        await self.service.update_bookmark(bookmark_id, owner_id, description, url)
        await self._invalidate(owner_id, "update")

    async def delete_bookmark(self, bookmark_id: str, owner_id: str) -> None:
        set_owner_context(owner_id)
        await self.service.delete_bookmark(bookmark_id, owner_id)
        await self._invalidate(owner_id, "delete")

    async def drain(self) -> None:
        """Wait for every pending write-back to finish."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    @property
    def pending_writes(self) -> int:
        return len(self._pending_writes)

    async def _read_cached_page(self, group: str, entry: str) -> Optional[PagedResult[Bookmark]]:
        try:
            payload = await self.cache.get(group, entry)
        except CacheMissError:
            self.logger.debug("Cache miss", group_key=group, key=entry)
            return None
        except Exception as e:
            self.logger.error("Cache read failed", group_key=group, key=entry, error=str(e))
            return None

        if not payload:
            return None

        try:
            page = PagedResult[Bookmark].model_validate_json(payload)
        except ValueError as e:
            # pydantic.ValidationError and UnicodeDecodeError are both ValueErrors
            self.logger.warning(
                "Failed to decode cached page",
                group_key=group,
                key=entry,
                error=str(e)
            )
            return None

        self.logger.debug("Cache hit", group_key=group, key=entry)
        return page

    def _schedule_write_back(self, group: str, entry: str, result: PagedResult[Bookmark]) -> None:
        try:
            payload = result.model_dump_json().encode("utf-8")
        except Exception as e:
            self.logger.warning("Failed to encode page for caching", group_key=group, key=entry, error=str(e))
            return

        task = asyncio.create_task(self._write_back(group, entry, payload))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_back(self, group: str, entry: str, payload: bytes) -> None:
        try:
            await asyncio.wait_for(
                self.cache.set(group, entry, payload, self.ttl_seconds),
                timeout=self.write_timeout_seconds
            )
            self.logger.debug("Cached page", group_key=group, key=entry, ttl=self.ttl_seconds)
        except asyncio.TimeoutError:
            self.logger.error(
                "Timed out caching page",
                group_key=group,
                key=entry,
                timeout=self.write_timeout_seconds
            )
        except Exception as e:
            self.logger.error("Cannot cache page", group_key=group, key=entry, error=str(e))

    async def _invalidate(self, owner_id: str, operation: str) -> None:
        group = group_key(owner_id)
        try:
            await asyncio.wait_for(self.cache.delete(group), timeout=self.write_timeout_seconds)
        except asyncio.TimeoutError:
            self.logger.error(
                "Timed out invalidating bookmark cache",
                operation=operation,
                owner_id=owner_id,
                group_key=group
            )
        except Exception as e:
            self.logger.error(
                "Failed to invalidate bookmark cache",
                operation=operation,
                owner_id=owner_id,
                group_key=group,
                error=str(e)
            )
