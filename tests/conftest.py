"""Shared pytest fixtures for cart tests."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest

from gomarket.core.cart_manager import CartManager
from gomarket.core.exceptions import StorageException
from gomarket.core.storage import KeyValueStore, MemoryKeyValueStore


@dataclass
class RecordingStore(KeyValueStore):
    """In-memory store that records calls and can be told to fail or stall."""

    data: dict[str, str] = field(default_factory=dict)
    set_calls: list[tuple[str, str]] = field(default_factory=list)
    fail_get: bool = False
    fail_set: bool = False
    ack: bool = True
    get_gate: asyncio.Event | None = None

    async def get(self, key: str) -> str | None:
        if self.get_gate is not None:
            await self.get_gate.wait()
        if self.fail_get:
            raise StorageException("store offline")
        return self.data.get(key)

    async def set(self, key: str, blob: str) -> bool:
        self.set_calls.append((key, blob))
        if self.fail_set:
            raise StorageException("disk full")
        self.data[key] = blob
        return self.ack

@pytest.fixture()
def memory_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()

@pytest.fixture()
def recording_store() -> RecordingStore:
    return RecordingStore()

@pytest.fixture()
def manager(recording_store: RecordingStore) -> CartManager:
    """Unstarted manager over a recording store."""
    return CartManager(recording_store)
