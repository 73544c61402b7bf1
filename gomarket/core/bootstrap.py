"""Application bootstrap wiring the cart manager to its store."""
from __future__ import annotations

import logging

from gomarket.integrations.file_store import FileKeyValueStore
from gomarket.integrations.redis_store import RedisKeyValueStore

from .cart_manager import CartManager
from .config import Settings
from .constants import STORAGE_BACKEND_FILE, STORAGE_BACKEND_MEMORY, STORAGE_BACKEND_REDIS
from .exceptions import ConfigurationException
from .storage import KeyValueStore, MemoryKeyValueStore

logger = logging.getLogger("gomarket.bootstrap")


def create_store(settings: Settings) -> KeyValueStore:
    """Create the persistent store selected by configuration."""
    storage = settings.storage

    if storage.backend == STORAGE_BACKEND_REDIS:
        if not storage.redis_url:
            raise ConfigurationException("Redis cart storage requires REDIS_URL")
        logger.info("Using Redis for cart storage")
        return RedisKeyValueStore(storage.redis_url, ttl=storage.redis_ttl)

    if storage.backend == STORAGE_BACKEND_FILE:
        logger.info("Using file %s for cart storage", storage.path)
        return FileKeyValueStore(storage.path)

    if storage.backend == STORAGE_BACKEND_MEMORY:
        logger.warning("Using in-memory cart storage; cart will be LOST on restart")
        return MemoryKeyValueStore()

    raise ConfigurationException(f"Unknown cart storage backend {storage.backend!r}")


def build_cart_manager(settings: Settings) -> CartManager:
    """Create an unstarted cart manager from configuration."""
    store = create_store(settings)
    return CartManager(store, key=settings.storage.key, owns_store=True)
