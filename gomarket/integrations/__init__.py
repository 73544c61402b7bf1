"""Persistent store backends."""

from .file_store import FileKeyValueStore
from .redis_store import RedisKeyValueStore

__all__ = ["FileKeyValueStore", "RedisKeyValueStore"]
