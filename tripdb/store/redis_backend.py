"""
Redis blob backend for the document store.

Each collection maps onto the key space ``{namespace}:{collection}:``.
Unlike a cache, a missing connection is an error here: transport failures are
wrapped in ``StoreBackendError`` and propagate to the caller.
"""

import asyncio
import logging
from typing import Dict, List, Optional

from redis import asyncio as aioredis
from redis.asyncio import Redis
from redis.exceptions import RedisError

from tripdb.config.settings import RedisSettings
from tripdb.core.exceptions import StoreBackendError
from tripdb.store.backend import BlobBackend, BlobEntry, BlobNotFoundError, BlobStore

_GLOB_SPECIAL = set("*?[]\\")


def escape_glob(text: str) -> str:
    """Escape Redis MATCH wildcards so a key prefix is matched literally."""
    return "".join("\\" + ch if ch in _GLOB_SPECIAL else ch for ch in text)


class RedisBlobStore(BlobStore):
    """One collection stored as plain string keys in Redis."""

    def __init__(self, backend: "RedisBackend", name: str):
        super().__init__(name)
        self._backend = backend
        self._key_prefix = f"{backend.namespace}:{name}:"

    def _full_key(self, key: str) -> str:
        return f"{self._key_prefix}{key}"

    async def get(self, key: str) -> str:
        client = await self._backend.client()
        try:
            value = await client.get(self._full_key(key))
        except RedisError as e:
            raise StoreBackendError("get", key) from e
        if value is None:
            raise BlobNotFoundError(self.name, key)
        return value

    async def set(self, key: str, value: str) -> None:
        client = await self._backend.client()
        try:
            await client.set(self._full_key(key), value)
        except RedisError as e:
            raise StoreBackendError("set", key) from e

    async def delete(self, key: str) -> None:
        client = await self._backend.client()
        try:
            removed = await client.delete(self._full_key(key))
        except RedisError as e:
            raise StoreBackendError("delete", key) from e
        if not removed:
            raise BlobNotFoundError(self.name, key)

    async def list(self, prefix: str = "", limit: int = 100) -> List[BlobEntry]:
        if limit <= 0:
            return []
        client = await self._backend.client()
        pattern = escape_glob(self._full_key(prefix)) + "*"
        keys: List[str] = []
        try:
            async for full_key in client.scan_iter(match=pattern, count=min(limit, 1000)):
                keys.append(full_key[len(self._key_prefix):])
                if len(keys) >= limit:
                    break
        except RedisError as e:
            raise StoreBackendError("list", prefix) from e
        return [BlobEntry(key=k) for k in sorted(keys)]


class RedisBackend(BlobBackend):
    """
    Redis connection shared by every collection store.

    The connection is opened lazily on first use and guarded by a lock so
    concurrent first calls share one client.
    """

    def __init__(
        self,
        redis_url: Optional[str] = None,
        namespace: str = "tripdb",
        settings: Optional[RedisSettings] = None,
        client: Optional[Redis] = None,
    ):
        settings = settings or RedisSettings()
        self.redis_url = redis_url or settings.url
        self.namespace = namespace
        self.socket_timeout = float(settings.socket_timeout)
        self.redis_client: Optional[Redis] = client
        self.logger = logging.getLogger(__name__)
        self._connection_lock = asyncio.Lock()
        self._stores: Dict[str, RedisBlobStore] = {}

    def store(self, name: str) -> RedisBlobStore:
        if name not in self._stores:
            self._stores[name] = RedisBlobStore(self, name)
        return self._stores[name]

    async def connect(self) -> None:
        async with self._connection_lock:
            if self.redis_client is not None:
                return
            self.logger.info(f"Connecting to Redis at {self.redis_url}")
            client = aioredis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=self.socket_timeout,
                socket_connect_timeout=self.socket_timeout,
                retry_on_timeout=True,
            )
            try:
                await client.ping()
            except RedisError as e:
                await client.aclose()
                raise StoreBackendError("connect", details={"url": self.redis_url}) from e
            self.redis_client = client
            self.logger.info("Successfully connected to Redis")

    async def client(self) -> Redis:
        if self.redis_client is None:
            await self.connect()
        return self.redis_client

    async def close(self) -> None:
        async with self._connection_lock:
            if self.redis_client is not None:
                try:
                    await self.redis_client.aclose()
                    self.logger.info("Disconnected from Redis")
                finally:
                    self.redis_client = None
