"""
Cart store: single owner of the customer's in-progress selection.

The in-memory mapping is the source of truth while the process lives. Every
mutation schedules a best-effort write of the whole cart to durable storage;
writes are serialized and always store the latest state, so a burst of
mutations ends with the final cart on disk. Storage failures are logged and
never reach the caller.
"""
from __future__ import annotations

import asyncio
import hashlib
import json
from decimal import Decimal
from typing import Any, Callable, Iterator, Mapping

from teastore.core import order_math
from teastore.core.constants import CART_STORAGE_KEY, MIN_LINE_QUANTITY
from teastore.core.subscriptions import ListenerRegistry, Subscription
from teastore.domain.cart import CartLineItem, DetailedCartItem
from teastore.domain.entities import Product
from teastore.integrations.kv_store import KeyValueStore
from teastore.logging_config import logger


def _line_from_product(product: Product | CartLineItem | Mapping[str, Any]) -> CartLineItem:
    if isinstance(product, CartLineItem):
        return CartLineItem(product.id, product.product_name, product.unit_price, MIN_LINE_QUANTITY)
    if isinstance(product, Product):
        return CartLineItem(product.id, product.product_name, product.price, MIN_LINE_QUANTITY)
    name = product.get("product_name") or product.get("name") or ""
    return CartLineItem(
        id=str(product["id"]),
        product_name=str(name),
        unit_price=order_math.to_decimal(product.get("price")),
        quantity=MIN_LINE_QUANTITY,
    )


class CartStore:
    """Cart line items keyed by product id, persisted under a fixed key."""

    def __init__(self, storage: KeyValueStore, *, storage_key: str = CART_STORAGE_KEY):
        self._storage = storage
        self._storage_key = storage_key
        self._items: dict[str, CartLineItem] = {}
        self._listeners: ListenerRegistry[CartStore] = ListenerRegistry()
        self._write_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()
        self._dirty = False
        self._loaded = False

    # ---------------- reads ----------------

    def items(self) -> tuple[CartLineItem, ...]:
        """Immutable snapshot of the current lines, in insertion order."""
        return tuple(self._items.values())

    def get(self, product_id: str) -> CartLineItem | None:
        return self._items.get(str(product_id))

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, product_id: object) -> bool:
        return str(product_id) in self._items

    def is_empty(self) -> bool:
        return not self._items

    def count(self) -> int:
        """Total number of units across all lines."""
        return sum(item.quantity for item in self._items.values())

    def detailed_items(self) -> Iterator[DetailedCartItem]:
        """Lines with bulk discount figures, recomputed on every call."""
        for item in list(self._items.values()):
            yield DetailedCartItem.from_item(item)

    def total(self) -> Decimal:
        return order_math.calc_items_total((item.unit_price, item.quantity) for item in self._items.values())

    def fingerprint(self) -> str:
        """Hash of the cart content; changes whenever the charged amount could."""
        content = sorted((item.id, str(item.unit_price), item.quantity) for item in self._items.values())
        return hashlib.sha256(json.dumps(content).encode("utf-8")).hexdigest()

    # ---------------- mutations ----------------

    def add_item(self, product: Product | CartLineItem | Mapping[str, Any]) -> CartLineItem:
        line = _line_from_product(product)
        existing = self._items.get(line.id)
        if existing is not None:
            line = CartLineItem(existing.id, existing.product_name, existing.unit_price, existing.quantity + 1)
        self._items[line.id] = line
        self._changed()
        return line

    def remove_item(self, product_id: str) -> None:
        if self._items.pop(str(product_id), None) is not None:
            self._changed()

    def increment_quantity(self, product_id: str) -> None:
        item = self._items.get(str(product_id))
        if item is None:
            return
        self._items[item.id] = CartLineItem(item.id, item.product_name, item.unit_price, item.quantity + 1)
        self._changed()

    def decrement_quantity(self, product_id: str) -> None:
        item = self._items.get(str(product_id))
        if item is None or item.quantity <= MIN_LINE_QUANTITY:
            return
        self._items[item.id] = CartLineItem(item.id, item.product_name, item.unit_price, item.quantity - 1)
        self._changed()

    def clear(self) -> None:
        """Empty the in-memory cart; the stored copy is overwritten, not deleted."""
        if not self._items:
            return
        self._items.clear()
        self._changed()

    async def clear_and_persist(self) -> None:
        """Empty the cart and delete the durable copy (session teardown)."""
        had_items = bool(self._items)
        self._items.clear()
        self._dirty = False
        async with self._write_lock:
            try:
                await self._storage.remove(self._storage_key)
            except Exception as exc:
                logger.warning("Failed to remove stored cart: %s", exc)
        if had_items:
            self._listeners.notify(self)

    def subscribe(self, listener: Callable[["CartStore"], None]) -> Subscription:
        return self._listeners.subscribe(listener)

    # ---------------- persistence ----------------

    def _serialize(self) -> str:
        return json.dumps([item.to_dict() for item in self._items.values()], ensure_ascii=False)

    def _changed(self) -> None:
        self._dirty = True
        self._schedule_write()
        self._listeners.notify(self)

    def _schedule_write(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # no loop yet: flush() writes the deferred state
            return
        task = loop.create_task(self._write_latest())
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write_latest(self) -> None:
        async with self._write_lock:
            if not self._dirty:
                return
            self._dirty = False
            payload = self._serialize()
            try:
                await self._storage.set(self._storage_key, payload)
            except Exception as exc:
                logger.warning("Failed to persist cart: %s", exc)

    async def flush(self) -> None:
        """Wait for outstanding writes; write deferred state if any."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)
        if self._dirty:
            await self._write_latest()

    async def load(self) -> None:
        """Hydrate from durable storage once; unreadable data leaves the cart empty."""
        if self._loaded:
            return
        self._loaded = True

        try:
            raw = await self._storage.get(self._storage_key)
        except Exception as exc:
            logger.warning("Failed to read stored cart: %s", exc)
            return
        if not raw:
            return

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise ValueError(f"expected a list, got {type(data).__name__}")
            restored: dict[str, CartLineItem] = {}
            for raw_item in data:
                item = CartLineItem.from_dict(raw_item)
                restored[item.id] = item
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("Stored cart is unreadable, starting empty: %s", exc)
            return

        self._items = restored
        logger.info("Cart restored with %s lines", len(restored))
        self._listeners.notify(self)
