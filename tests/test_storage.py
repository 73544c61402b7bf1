import json

import pytest

from gomarket.core.exceptions import StorageException
from gomarket.core.storage import MemoryKeyValueStore
from gomarket.integrations.file_store import FileKeyValueStore


@pytest.mark.asyncio
async def test_memory_store_set_and_get() -> None:
    store = MemoryKeyValueStore()

    assert await store.get("cart") is None
    assert await store.set("cart", "[]") is True
    assert await store.get("cart") == "[]"
    assert store.snapshot() == {"cart": "[]"}


@pytest.mark.asyncio
async def test_memory_store_initial_data_is_copied() -> None:
    initial = {"cart": "[]"}
    store = MemoryKeyValueStore(initial)
    await store.set("cart", "[1]")

    assert initial == {"cart": "[]"}


@pytest.mark.asyncio
async def test_file_store_missing_file_reads_none(tmp_path) -> None:
    store = FileKeyValueStore(tmp_path / "cart.json")

    assert await store.get("cart") is None


@pytest.mark.asyncio
async def test_file_store_creates_directory_and_persists(tmp_path) -> None:
    path = tmp_path / "nested" / "storage" / "cart.json"
    store = FileKeyValueStore(path)

    assert await store.set("cart", '[{"id": "1"}]') is True
    assert await store.set("other", "x") is True

    reopened = FileKeyValueStore(path)
    assert await reopened.get("cart") == '[{"id": "1"}]'
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "cart": '[{"id": "1"}]',
        "other": "x",
    }
    assert not path.with_name("cart.json.tmp").exists()


@pytest.mark.asyncio
async def test_file_store_empty_file_reads_none(tmp_path) -> None:
    path = tmp_path / "cart.json"
    path.write_text("", encoding="utf-8")

    assert await FileKeyValueStore(path).get("cart") is None


@pytest.mark.asyncio
async def test_file_store_corrupted_file_raises(tmp_path) -> None:
    path = tmp_path / "cart.json"
    path.write_text("not json", encoding="utf-8")

    with pytest.raises(StorageException):
        await FileKeyValueStore(path).get("cart")


@pytest.mark.asyncio
async def test_file_store_non_string_value_raises(tmp_path) -> None:
    path = tmp_path / "cart.json"
    path.write_text('{"cart": [1, 2]}', encoding="utf-8")

    with pytest.raises(StorageException):
        await FileKeyValueStore(path).get("cart")
