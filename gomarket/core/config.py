"""Environment-driven configuration objects for the cart."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import (
    CART_STORAGE_KEY,
    DEFAULT_CART_STORAGE_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_STORAGE_BACKEND,
    STORAGE_BACKEND_REDIS,
    STORAGE_BACKENDS,
)
from .exceptions import ConfigurationException


@dataclass(slots=True)
class StorageConfig:
    backend: str
    key: str
    path: str
    redis_url: str | None
    redis_ttl: int | None


@dataclass(slots=True)
class Settings:
    storage: StorageConfig
    log_level: str

    @property
    def redis_url(self) -> str | None:
        """Shortcut for the redis backend URL."""
        return self.storage.redis_url


def _int_or_none(value: str | None) -> int | None:
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ConfigurationException(f"CART_REDIS_TTL must be an integer, got {value!r}") from exc
    return parsed if parsed > 0 else None


def load_settings(env_file: str | os.PathLike[str] | None = None) -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv(env_file)

    backend = os.getenv("CART_STORAGE_BACKEND", DEFAULT_STORAGE_BACKEND).strip().lower()
    if backend not in STORAGE_BACKENDS:
        raise ConfigurationException(
            f"CART_STORAGE_BACKEND must be one of {sorted(STORAGE_BACKENDS)}, got {backend!r}"
        )

    redis_url = os.getenv("REDIS_URL") or None
    if backend == STORAGE_BACKEND_REDIS and not redis_url:
        raise ConfigurationException("REDIS_URL environment variable is not set")

    storage = StorageConfig(
        backend=backend,
        key=os.getenv("CART_STORAGE_KEY") or CART_STORAGE_KEY,
        path=os.getenv("CART_STORAGE_PATH") or DEFAULT_CART_STORAGE_PATH,
        redis_url=redis_url,
        redis_ttl=_int_or_none(os.getenv("CART_REDIS_TTL")),
    )

    return Settings(
        storage=storage,
        log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )
