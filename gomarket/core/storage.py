"""Persistent key-value store contract used by the cart manager."""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod

logger = logging.getLogger("gomarket.storage")


class KeyValueStore(ABC):
    """Abstract async key-value store holding serialized blobs."""

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """Get blob stored under key, or None if absent."""
        pass

    @abstractmethod
    async def set(self, key: str, blob: str) -> bool:
        """Store blob under key. Returns the backend's acknowledgement."""
        pass

    async def close(self) -> None:
        """Release backend resources."""
        return None


class MemoryKeyValueStore(KeyValueStore):
    """
    In-memory store.

    Not durable; useful for tests and sessions that should not outlive
    the process.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return self._data.get(key)

    async def set(self, key: str, blob: str) -> bool:
        async with self._lock:
            self._data[key] = blob
            logger.debug("Stored %d bytes under %s", len(blob), key)
            return True

    def snapshot(self) -> dict[str, str]:
        """Copy of everything currently stored."""
        return dict(self._data)
