"""Cart state manager: in-memory line items mirrored to a key-value store.

The manager is the single writer of the cart. Every mutation replaces the
item tuple, notifies subscribers synchronously and schedules a
fire-and-forget write of the whole snapshot. Writes are chained behind the
initial load and behind each other, so they reach the store in mutation
order and never overwrite a snapshot that has not been read yet.

Write failures are logged and dropped. Nothing is retried.
"""
from __future__ import annotations

import asyncio
import itertools
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Optional

from gomarket.domain.cart import CartItem, DescriptorLike, dump_cart, load_cart, to_descriptor

from .constants import CART_STORAGE_KEY
from .exceptions import CartProviderMissingException, CartSnapshotException
from .logging_config import logger as root_logger
from .storage import KeyValueStore

logger = root_logger.getChild("cart")

CartState = tuple[CartItem, ...]
CartSubscriber = Callable[[CartState], None]
Unsubscribe = Callable[[], None]


class CartManager:
    """
    Owns the cart line items and keeps the persisted snapshot in sync.

    Designed for a single asyncio event loop: mutations are plain method
    calls from UI handlers and must not overlap with each other from
    different threads.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = CART_STORAGE_KEY,
        owns_store: bool = False,
    ):
        self._store = store
        self._key = key
        self._owns_store = owns_store
        self._items: CartState = ()
        self._subscribers: dict[int, CartSubscriber] = {}
        self._tokens = itertools.count()
        self._load_task: Optional[asyncio.Task] = None
        self._last_write: Optional[asyncio.Task] = None
        self._pending_writes: set[asyncio.Task] = set()
        self._mutated = False
        self._closed = False

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def items(self) -> CartState:
        """Current cart line items, in display order."""
        return self._items

    @property
    def key(self) -> str:
        return self._key

    @property
    def is_active(self) -> bool:
        return not self._closed

    @property
    def is_loaded(self) -> bool:
        return self._load_task is not None and self._load_task.done()

    @property
    def item_count(self) -> int:
        """Total number of units across all line items."""
        return sum(item.quantity for item in self._items)

    @property
    def is_empty(self) -> bool:
        return not self._items

    def __len__(self) -> int:
        return len(self._items)

    def get_item(self, product_id: str) -> CartItem | None:
        for item in self._items:
            if item.id == product_id:
                return item
        return None

    def subscribe(self, callback: CartSubscriber) -> Unsubscribe:
        """Register callback for every published state.

        Returns a callable that removes the subscription. Calling it more
        than once is harmless.
        """
        token = next(self._tokens)
        self._subscribers[token] = callback
        logger.debug("Cart subscriber added, total: %d", len(self._subscribers))

        def unsubscribe() -> None:
            self._subscribers.pop(token, None)

        return unsubscribe

    def _publish(self) -> None:
        items = self._items
        for callback in list(self._subscribers.values()):
            try:
                callback(items)
            except Exception:
                logger.exception("Cart subscriber %r failed", callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _ensure_loading(self) -> asyncio.Task:
        if self._load_task is None:
            self._load_task = asyncio.create_task(self._load(), name=f"cart-load:{self._key}")
        return self._load_task

    async def start(self) -> None:
        """Begin restoring the persisted snapshot. Returns without waiting for it."""
        self._ensure_active()
        self._ensure_loading()

    async def ready(self) -> None:
        """Wait for the initial load. Re-raises a malformed-snapshot error."""
        await self._ensure_loading()

    async def _load(self) -> None:
        try:
            blob = await self._store.get(self._key)
        except Exception as exc:
            logger.warning("Cart snapshot read failed, starting with empty cart: %s", exc)
            return

        if not blob:
            logger.info("No cart snapshot under %s, starting with empty cart", self._key)
            return

        try:
            items = load_cart(blob, self._key)
        except CartSnapshotException as exc:
            logger.error("%s", exc.message)
            raise

        if self._mutated:
            logger.warning(
                "Cart changed before snapshot load finished; keeping in-memory cart (%d items)",
                len(self._items),
            )
            return

        self._items = items
        logger.info("Restored cart with %d items from %s", len(items), self._key)
        self._publish()

    async def flush(self) -> None:
        """Wait for every persistence write scheduled so far."""
        while self._pending_writes:
            await asyncio.wait(set(self._pending_writes))

    async def close(self) -> None:
        """Flush pending writes and deactivate the manager."""
        if self._closed:
            return
        if self._load_task is not None and not self._load_task.done():
            await asyncio.wait({self._load_task})
        await self.flush()
        self._closed = True
        self._subscribers.clear()
        if self._owns_store:
            await self._store.close()
        logger.debug("Cart manager for %s closed", self._key)

    async def __aenter__(self) -> CartManager:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _ensure_active(self) -> None:
        if self._closed:
            raise CartProviderMissingException("CartManager is closed")

    def add(self, descriptor: DescriptorLike) -> None:
        """Add one unit of a product.

        An existing line keeps its position and takes the incoming title,
        image and price; a new product is appended with quantity 1.
        """
        self._ensure_active()
        product = to_descriptor(descriptor)

        existing = self.get_item(product.id)
        if existing is not None:
            items = tuple(
                CartItem.from_descriptor(product, quantity=item.quantity + 1)
                if item.id == product.id
                else item
                for item in self._items
            )
            logger.info("Updated cart item %s qty=%d", product.id, existing.quantity + 1)
        else:
            items = (*self._items, CartItem.from_descriptor(product))
            logger.info("Added item %s to cart", product.id)

        self._commit(items)

    def increment(self, product_id: str) -> None:
        """Add one unit to an existing line. Unknown ids leave the cart unchanged."""
        self._ensure_active()
        items = tuple(
            item.with_quantity(item.quantity + 1) if item.id == product_id else item
            for item in self._items
        )
        if self.get_item(product_id) is not None:
            logger.info("Incremented cart item %s", product_id)
        self._commit(items)

    def decrement(self, product_id: str) -> None:
        """Remove one unit; a line at quantity 1 is dropped from the cart."""
        self._ensure_active()
        higher_than_one = any(
            item.id == product_id and item.quantity > 1 for item in self._items
        )

        if higher_than_one:
            items = tuple(
                item.with_quantity(item.quantity - 1) if item.id == product_id else item
                for item in self._items
            )
        else:
            items = tuple(item for item in self._items if item.id != product_id)
            if len(items) != len(self._items):
                logger.info("Removed item %s from cart", product_id)

        self._commit(items)

    def _commit(self, items: CartState) -> None:
        self._ensure_loading()
        if not self.is_loaded and items != self._items:
            self._mutated = True
        self._items = items
        self._publish()
        self._schedule_write()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _schedule_write(self) -> None:
        task = asyncio.create_task(self._write(self._last_write), name=f"cart-write:{self._key}")
        self._last_write = task
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write(self, previous: Optional[asyncio.Task]) -> bool:
        # Never race ahead of the initial load or an earlier write.
        waits = {task for task in (self._load_task, previous) if task is not None}
        if waits:
            await asyncio.wait(waits)

        blob = dump_cart(self._items)
        try:
            acknowledged = await self._store.set(self._key, blob)
        except Exception as exc:
            logger.error("Cart snapshot write failed for %s: %s", self._key, exc)
            return False

        if not acknowledged:
            logger.warning("Cart snapshot write for %s was not acknowledged", self._key)
            return False
        return True


_active_cart: ContextVar[Optional[CartManager]] = ContextVar("gomarket_active_cart", default=None)


@asynccontextmanager
async def cart_provider(manager: CartManager) -> AsyncIterator[CartManager]:
    """Start manager and make it the active cart for the enclosed block."""
    await manager.start()
    token = _active_cart.set(manager)
    try:
        yield manager
    finally:
        _active_cart.reset(token)
        await manager.close()


def use_cart() -> CartManager:
    """Return the active cart manager."""
    manager = _active_cart.get()
    if manager is None or not manager.is_active:
        raise CartProviderMissingException()
    return manager
