"""
Integration tests for bookmark writes and cached list reads.

The real service, repository and in-memory cache are wired together; only
the HTTP layer is left out.
"""

import asyncio
import pytest
from unittest.mock import patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_bookmarks.app.bookmarks.cached_service import CachedBookmarkService
from service_bookmarks.app.bookmarks.repository import InMemoryBookmarkRepository
from service_bookmarks.app.bookmarks.service import DefaultBookmarkService
from service_bookmarks.app.cache.memory_cache import InMemoryCacheStore
from service_bookmarks.app.pagination import PageRequest
from shared.errors import ValidationError


@pytest.fixture
def repository():
    return InMemoryBookmarkRepository()


@pytest.fixture
def store():
    return InMemoryCacheStore()


@pytest.fixture
def base_service(repository):
    return DefaultBookmarkService(repository)


@pytest.fixture
def cached(base_service, store):
    return CachedBookmarkService(base_service, store, ttl_seconds=3600)


class TestBookmarkCacheFlow:
    """End-to-end flows across service, repository and cache."""

    @pytest.mark.asyncio
    async def test_create_forces_fresh_list(self, cached, store):
        """A create drops the owner's cached pages so the next list is fresh."""
        await cached.create_bookmark("U1", "first", "https://first.example")

        first = await cached.list_bookmarks("U1", PageRequest(page=1, limit=10))
        await cached.drain()
        assert first.metadata.total_records == 1
        assert await store.get("get_bookmarks_U1", "1_10")

        await cached.create_bookmark("U1", "second", "https://second.example")

        second = await cached.list_bookmarks("U1", PageRequest(page=1, limit=10))
        await cached.drain()
        assert second.metadata.total_records == 2
        assert [b.description for b in second.data] == ["second", "first"]

    @pytest.mark.asyncio
    async def test_cached_page_served_without_repository(self, cached, repository):
        await cached.create_bookmark("U1", "first", "https://first.example")
        fresh = await cached.list_bookmarks("U1", PageRequest(page=1, limit=10))
        await cached.drain()

        with patch.object(repository, "list", side_effect=AssertionError("repository hit")):
            again = await cached.list_bookmarks("U1", PageRequest(page=0, limit=0))

        assert again == fresh

    @pytest.mark.asyncio
    async def test_update_and_delete_refresh_pages(self, cached):
        bookmark = await cached.create_bookmark("U1", "draft", "https://draft.example")
        await cached.list_bookmarks("U1", PageRequest())
        await cached.drain()

        await cached.update_bookmark(bookmark.id, "U1", "final", "https://final.example")
        updated = await cached.list_bookmarks("U1", PageRequest())
        await cached.drain()
        assert updated.data[0].description == "final"

        await cached.delete_bookmark(bookmark.id, "U1")
        emptied = await cached.list_bookmarks("U1", PageRequest())
        assert emptied.data == []
        assert emptied.metadata.last_page == 1

    @pytest.mark.asyncio
    async def test_rejected_update_keeps_pages_cacheable(self, cached, repository):
        """An invalid update never reaches storage, so cached pages stay readable."""
        bookmark = await cached.create_bookmark("U1", "first", "https://first.example")

        with pytest.raises(ValidationError):
            await cached.update_bookmark(bookmark.id, "U1", "x" * 300, "https://first.example")

        await cached.list_bookmarks("U1", PageRequest(page=1, limit=10))
        await cached.drain()

        with patch.object(repository, "list", wraps=repository.list) as list_spy:
            for _ in range(3):
                page = await cached.list_bookmarks("U1", PageRequest(page=1, limit=10))
                assert page.data[0].description == "first"

        assert list_spy.await_count == 0

    @pytest.mark.asyncio
    async def test_updated_page_is_served_from_cache(self, cached, repository):
        bookmark = await cached.create_bookmark("U1", "first", "https://first.example")
        await cached.update_bookmark(bookmark.id, "U1", "y" * 256, "https://updated.example")

        await cached.list_bookmarks("U1", PageRequest(page=1, limit=10))
        await cached.drain()

        with patch.object(repository, "list", wraps=repository.list) as list_spy:
            page = await cached.list_bookmarks("U1", PageRequest(page=1, limit=10))

        assert page.data[0].description == "y" * 256
        assert list_spy.await_count == 0

    @pytest.mark.asyncio
    async def test_other_owners_pages_survive_a_write(self, cached, repository):
        await cached.create_bookmark("U2", "theirs", "https://theirs.example")
        await cached.list_bookmarks("U2", PageRequest())
        await cached.drain()

        await cached.create_bookmark("U1", "mine", "https://mine.example")

        with patch.object(repository, "list", side_effect=AssertionError("repository hit")):
            theirs = await cached.list_bookmarks("U2", PageRequest())
        assert theirs.data[0].description == "theirs"

    @pytest.mark.asyncio
    async def test_populate_after_invalidate_race_is_bounded_by_ttl(self, base_service, repository):
        """A write-back that lands after an invalidation repopulates a stale page.

        The cache does not fence this race; the stale page lives until the
        group expires or the owner writes again.
        """
        clock_now = [0.0]
        store = InMemoryCacheStore(clock=lambda: clock_now[0])
        cached = CachedBookmarkService(base_service, store, ttl_seconds=60)
        await cached.create_bookmark("U1", "first", "https://first.example")

        release_read = asyncio.Event()
        read_done = asyncio.Event()
        real_list = repository.list

        async def slow_list(*args, **kwargs):
            result = await real_list(*args, **kwargs)
            read_done.set()
            await release_read.wait()
            return result

        with patch.object(repository, "list", side_effect=slow_list):
            reader = asyncio.create_task(cached.list_bookmarks("U1", PageRequest()))
            await read_done.wait()

            # A write commits and invalidates while the reader still holds old rows
            await cached.create_bookmark("U1", "second", "https://second.example")

            release_read.set()
            stale = await reader
            await cached.drain()

        assert stale.metadata.total_records == 1
        served = await cached.list_bookmarks("U1", PageRequest())
        assert served.metadata.total_records == 1

        clock_now[0] += 60
        fresh = await cached.list_bookmarks("U1", PageRequest())
        await cached.drain()
        assert fresh.metadata.total_records == 2
