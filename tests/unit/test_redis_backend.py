"""
Unit tests for the Redis blob backend against a mocked async client
"""
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from tripdb.core.exceptions import StoreBackendError
from tripdb.store.backend import BlobEntry, BlobNotFoundError
from tripdb.store.document_store import DocumentStore
from tripdb.store.redis_backend import RedisBackend, escape_glob


def _client(keys=()):
    client = MagicMock()
    client.get = AsyncMock(return_value=None)
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.aclose = AsyncMock()

    async def scan_iter(match=None, count=None):
        for key in keys:
            yield key

    client.scan_iter = MagicMock(side_effect=scan_iter)
    return client


@pytest.mark.asyncio
async def test_keys_are_namespaced_per_collection():
    client = _client()
    backend = RedisBackend(namespace="test", client=client)

    await backend.store("trips").set("t1", '{"title": "A"}')

    client.set.assert_awaited_once_with("test:trips:t1", '{"title": "A"}')


@pytest.mark.asyncio
async def test_get_missing_key_raises_blob_not_found():
    backend = RedisBackend(client=_client())

    with pytest.raises(BlobNotFoundError):
        await backend.store("users").get("u1")


@pytest.mark.asyncio
async def test_delete_missing_key_raises_blob_not_found():
    client = _client()
    client.delete.return_value = 0
    backend = RedisBackend(client=client)

    with pytest.raises(BlobNotFoundError):
        await backend.store("users").delete("u1")


@pytest.mark.asyncio
async def test_transport_errors_are_wrapped():
    client = _client()
    client.get.side_effect = RedisConnectionError("connection reset")
    backend = RedisBackend(client=client)

    with pytest.raises(StoreBackendError) as exc_info:
        await backend.store("users").get("u1")

    assert exc_info.value.status_code == 503
    assert isinstance(exc_info.value.__cause__, RedisConnectionError)


@pytest.mark.asyncio
async def test_list_strips_prefix_and_caps_results():
    client = _client(keys=["tripdb:trips:b", "tripdb:trips:a", "tripdb:trips:c"])
    backend = RedisBackend(client=client)

    entries = await backend.store("trips").list(limit=2)

    assert entries == [BlobEntry("a"), BlobEntry("b")]
    assert client.scan_iter.call_args.kwargs["match"] == "tripdb:trips:*"


@pytest.mark.asyncio
async def test_list_escapes_glob_characters_in_prefix():
    client = _client()
    backend = RedisBackend(client=client)

    await backend.store("trips").list(prefix="a*b")

    assert client.scan_iter.call_args.kwargs["match"] == "tripdb:trips:a\\*b*"


def test_escape_glob():
    assert escape_glob("plain") == "plain"
    assert escape_glob("x?[y]") == "x\\?\\[y\\]"


@pytest.mark.asyncio
async def test_document_store_reads_through_redis():
    client = _client()
    client.get.return_value = '{"_id": "t1", "title": "Murchison Falls", "_version": 1}'
    store = DocumentStore(RedisBackend(client=client))

    found = await store.find_by_id("trips", "t1")

    assert found["title"] == "Murchison Falls"
    client.get.assert_awaited_once_with("tripdb:trips:t1")


@pytest.mark.asyncio
async def test_close_releases_client():
    client = _client()
    backend = RedisBackend(client=client)

    await backend.close()

    client.aclose.assert_awaited_once()
    assert backend.redis_client is None


@pytest.mark.asyncio
async def test_list_with_zero_limit_skips_scan():
    client = _client(keys=["tripdb:trips:a"])
    backend = RedisBackend(client=client)

    assert await backend.store("trips").list(limit=0) == []
    client.scan_iter.assert_not_called()
