"""Redis-backed key-value store for the cart snapshot."""
from __future__ import annotations

import logging
from typing import Any

import redis.asyncio as aioredis

from gomarket.core.exceptions import StorageException
from gomarket.core.storage import KeyValueStore

logger = logging.getLogger("gomarket.storage")


class RedisKeyValueStore(KeyValueStore):
    """
    Redis store.

    Shared across processes. The client is created lazily on first use so
    the store can be built outside a running event loop.
    """

    def __init__(self, redis_url: str, ttl: int | None = None):
        self._redis_url = redis_url
        self._ttl = ttl
        self._client: Any = None

    def _ensure_connected(self) -> Any:
        """Ensure Redis client exists."""
        if self._client is None:
            self._client = aioredis.from_url(self._redis_url, decode_responses=True)
            logger.info("Redis cart store enabled")
        return self._client

    async def get(self, key: str) -> str | None:
        client = self._ensure_connected()
        try:
            value = await client.get(key)
        except Exception as exc:
            raise StorageException(f"Redis get failed for {key!r}: {exc}") from exc
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    async def set(self, key: str, blob: str) -> bool:
        client = self._ensure_connected()
        try:
            if self._ttl:
                return bool(await client.setex(key, self._ttl, blob))
            return bool(await client.set(key, blob))
        except Exception as exc:
            raise StorageException(f"Redis set failed for {key!r}: {exc}") from exc

    async def close(self) -> None:
        """Close Redis connection."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
