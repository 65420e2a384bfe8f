"""
Unit tests for the Redis grouped cache.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_bookmarks.app.cache.redis_cache import RedisCacheStore
from shared.errors import CacheError, CacheMissError


class TestRedisCacheStore:
    """Test cases for RedisCacheStore."""

    @pytest.fixture
    def pipeline(self):
        """Mock MULTI/EXEC pipeline; commands queue synchronously."""
        pipe = MagicMock()
        pipe.__aenter__.return_value = pipe
        pipe.__aexit__.return_value = None
        pipe.execute = AsyncMock(return_value=[1, True])
        return pipe

    @pytest.fixture
    def redis_client(self, pipeline):
        """Mock redis.asyncio client."""
        client = MagicMock()
        client.pipeline = MagicMock(return_value=pipeline)
        client.hget = AsyncMock(return_value=None)
        client.delete = AsyncMock(return_value=1)
        client.ping = AsyncMock(return_value=True)
        client.aclose = AsyncMock()
        return client

    @pytest.fixture
    def store(self, redis_client):
        return RedisCacheStore("redis://localhost:6379/0", client=redis_client)

    @pytest.mark.asyncio
    async def test_set_writes_hash_field_and_expiry_in_one_transaction(self, store, redis_client, pipeline):
        await store.set("get_bookmarks_u1", "1_10", b"payload", 86400)

        redis_client.pipeline.assert_called_once_with(transaction=True)
        pipeline.hset.assert_called_once_with("get_bookmarks_u1", "1_10", b"payload")
        pipeline.expire.assert_called_once_with("get_bookmarks_u1", 86400)
        pipeline.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_set_rounds_ttl_down_to_at_least_one_second(self, store, pipeline):
        await store.set("get_bookmarks_u1", "1_10", b"payload", 0.4)

        pipeline.expire.assert_called_once_with("get_bookmarks_u1", 1)

    @pytest.mark.asyncio
    async def test_set_propagates_transaction_failure(self, store, pipeline):
        pipeline.execute.side_effect = ConnectionError("redis down")

        with pytest.raises(ConnectionError):
            await store.set("get_bookmarks_u1", "1_10", b"payload", 86400)

        pipeline.__aexit__.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_returns_bytes(self, store, redis_client):
        redis_client.hget.return_value = b"payload"

        assert await store.get("get_bookmarks_u1", "1_10") == b"payload"
        redis_client.hget.assert_awaited_once_with("get_bookmarks_u1", "1_10")

    @pytest.mark.asyncio
    async def test_get_encodes_decoded_strings(self, store, redis_client):
        redis_client.hget.return_value = "payload"
        assert await store.get("get_bookmarks_u1", "1_10") == b"payload"

    @pytest.mark.asyncio
    async def test_get_missing_raises_cache_miss(self, store):
        with pytest.raises(CacheMissError) as exc_info:
            await store.get("get_bookmarks_u1", "1_10")

        assert exc_info.value.code == "CACHE_MISS"
        assert exc_info.value.details == {"group_key": "get_bookmarks_u1", "entry_key": "1_10"}

    @pytest.mark.asyncio
    async def test_delete_drops_whole_group(self, store, redis_client):
        await store.delete("get_bookmarks_u1")
        redis_client.delete.assert_awaited_once_with("get_bookmarks_u1")

    @pytest.mark.asyncio
    async def test_operations_before_start_fail(self):
        store = RedisCacheStore("redis://localhost:6379/0")

        with pytest.raises(CacheError) as exc_info:
            await store.get("group", "key")
        assert exc_info.value.code == "REDIS_NOT_STARTED"

    @pytest.mark.asyncio
    async def test_start_connects_and_pings(self, redis_client):
        store = RedisCacheStore("redis://localhost:6379/0")

        with patch("service_bookmarks.app.cache.redis_cache.redis.from_url", return_value=redis_client) as mock_from_url:
            await store.start()

        mock_from_url.assert_called_once()
        assert mock_from_url.call_args.args[0] == "redis://localhost:6379/0"
        redis_client.ping.assert_awaited_once()
        assert store.redis is redis_client

    @pytest.mark.asyncio
    async def test_start_failure_raises_cache_error(self, store, redis_client):
        redis_client.ping.side_effect = ConnectionError("refused")

        with pytest.raises(CacheError) as exc_info:
            await store.start()
        assert exc_info.value.code == "REDIS_START_FAILED"

    @pytest.mark.asyncio
    async def test_stop_closes_client(self, store, redis_client):
        await store.stop()

        redis_client.aclose.assert_awaited_once()
        assert store.redis is None

    @pytest.mark.asyncio
    async def test_health_check(self, store, redis_client):
        assert await store.health_check() is True

        redis_client.ping.side_effect = ConnectionError("refused")
        assert await store.health_check() is False
