"""JSON-file backed key-value store for local persistence."""
from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path

from gomarket.core.exceptions import StorageException
from gomarket.core.storage import KeyValueStore

logger = logging.getLogger("gomarket.storage")


class FileKeyValueStore(KeyValueStore):
    """Keeps every key in one JSON document on disk.

    The document is rewritten in full on each ``set`` through a temporary
    file and ``os.replace`` so a crash never leaves a half-written file.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self._path = Path(path)
        self._lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise StorageException(f"Cannot read {self._path}: {exc}") from exc
        if text == "":
            return {}
        try:
            document = json.loads(text)
        except ValueError as exc:
            raise StorageException(f"Corrupted store file {self._path}: {exc}") from exc
        if not isinstance(document, dict):
            raise StorageException(f"Corrupted store file {self._path}: not an object")
        return document

    def _write_document(self, document: dict[str, str]) -> None:
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(document, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self._path)
        except OSError as exc:
            raise StorageException(f"Cannot write {self._path}: {exc}") from exc

    def _get_sync(self, key: str) -> str | None:
        value = self._read_document().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageException(f"Value under {key!r} in {self._path} is not a string")
        return value

    def _set_sync(self, key: str, blob: str) -> bool:
        document = self._read_document()
        document[key] = blob
        self._write_document(document)
        return True

    async def get(self, key: str) -> str | None:
        async with self._lock:
            return await asyncio.to_thread(self._get_sync, key)

    async def set(self, key: str, blob: str) -> bool:
        async with self._lock:
            result = await asyncio.to_thread(self._set_sync, key, blob)
        logger.debug("Wrote %s to %s", key, self._path)
        return result
