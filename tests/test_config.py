import logging
import os

import pytest

from gomarket.core.bootstrap import build_cart_manager, create_store
from gomarket.core.config import load_settings
from gomarket.core.constants import CART_STORAGE_KEY, DEFAULT_CART_STORAGE_PATH
from gomarket.core.exceptions import ConfigurationException
from gomarket.core.logging_config import setup_logging
from gomarket.core.storage import MemoryKeyValueStore
from gomarket.integrations.file_store import FileKeyValueStore
from gomarket.integrations.redis_store import RedisKeyValueStore

ENV_VARS = (
    "CART_STORAGE_BACKEND",
    "CART_STORAGE_KEY",
    "CART_STORAGE_PATH",
    "CART_REDIS_TTL",
    "REDIS_URL",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # values loaded from .env files are not tracked by monkeypatch
    for name in ENV_VARS:
        os.environ.pop(name, None)


def test_defaults() -> None:
    settings = load_settings()

    assert settings.storage.backend == "file"
    assert settings.storage.key == CART_STORAGE_KEY
    assert settings.storage.path == DEFAULT_CART_STORAGE_PATH
    assert settings.redis_url is None
    assert settings.storage.redis_ttl is None
    assert settings.log_level == "INFO"


def test_redis_backend_requires_url(monkeypatch) -> None:
    monkeypatch.setenv("CART_STORAGE_BACKEND", "redis")

    with pytest.raises(ConfigurationException):
        load_settings()


def test_unknown_backend_rejected(monkeypatch) -> None:
    monkeypatch.setenv("CART_STORAGE_BACKEND", "sqlite")

    with pytest.raises(ConfigurationException):
        load_settings()


def test_invalid_ttl_rejected(monkeypatch) -> None:
    monkeypatch.setenv("CART_REDIS_TTL", "soon")

    with pytest.raises(ConfigurationException):
        load_settings()


def test_dotenv_file_is_loaded(tmp_path) -> None:
    (tmp_path / ".env").write_text("CART_STORAGE_BACKEND=memory\nLOG_LEVEL=debug\n")

    settings = load_settings(tmp_path / ".env")

    assert settings.storage.backend == "memory"
    assert settings.log_level == "DEBUG"


@pytest.mark.parametrize(
    "env, store_type",
    [
        ({"CART_STORAGE_BACKEND": "memory"}, MemoryKeyValueStore),
        ({"CART_STORAGE_BACKEND": "file", "CART_STORAGE_PATH": "carts/c.json"}, FileKeyValueStore),
        (
            {"CART_STORAGE_BACKEND": "redis", "REDIS_URL": "redis://localhost:6379/0", "CART_REDIS_TTL": "60"},
            RedisKeyValueStore,
        ),
    ],
)
def test_create_store_selects_backend(monkeypatch, env, store_type) -> None:
    for name, value in env.items():
        monkeypatch.setenv(name, value)

    store = create_store(load_settings())

    assert isinstance(store, store_type)


@pytest.mark.asyncio
async def test_build_cart_manager_uses_configured_key(monkeypatch) -> None:
    monkeypatch.setenv("CART_STORAGE_BACKEND", "file")
    monkeypatch.setenv("CART_STORAGE_KEY", "cart:guest")

    manager = build_cart_manager(load_settings())
    async with manager:
        manager.add({"id": "1", "title": "Shoe", "image_url": "u", "price": 10})

    reopened = build_cart_manager(load_settings())
    async with reopened:
        await reopened.ready()
        assert reopened.key == "cart:guest"
        assert [item.id for item in reopened.items] == ["1"]


def test_setup_logging_is_idempotent() -> None:
    before = list(logging.getLogger("gomarket").handlers)
    logger = setup_logging("debug")
    handlers = list(logger.handlers)

    try:
        again = setup_logging("warning")

        assert again is logger
        assert again.handlers == handlers
        assert again.level == logging.WARNING
    finally:
        for handler in handlers:
            if handler not in before:
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
