"""Orders and profiles repository adapter for application use cases."""
from __future__ import annotations

from typing import Iterable

from teastore.core.constants import TABLE_ORDER_PRODUCTS, TABLE_ORDERS, TABLE_PROFILES
from teastore.core.exceptions import BackendException, RecordNotFoundException
from teastore.domain.entities import Order, OrderLine, Profile
from teastore.domain.order import OrderStatus
from teastore.infra.db.base import first_row, parse_many, parse_one, unwrap
from teastore.integrations.supabase_data import SupabaseDataClient


class OrdersRepository:
    def __init__(self, db: SupabaseDataClient):
        self._db = db

    # ---------------- profiles ----------------

    async def get_profile(self, user_id: str) -> Profile | None:
        result = await self._db.select(TABLE_PROFILES, filters={"id": user_id}, limit=1)
        row = first_row(unwrap(result, TABLE_PROFILES, "load"))
        if row is None:
            return None
        return parse_one(Profile, row, TABLE_PROFILES)

    async def get_shipping_address(self, user_id: str) -> str | None:
        result = await self._db.select(TABLE_PROFILES, "address", filters={"id": user_id}, limit=1)
        row = first_row(unwrap(result, TABLE_PROFILES, "load"))
        if not row:
            return None
        address = row.get("address")
        if address is None:
            return None
        return str(address).strip() or None

    async def upsert_profile(self, user_id: str, **values: object) -> Profile:
        payload = {"id": user_id, **values}
        result = await self._db.upsert(TABLE_PROFILES, payload)
        row = first_row(unwrap(result, TABLE_PROFILES, "save"))
        return parse_one(Profile, row or payload, TABLE_PROFILES)

    # ---------------- orders ----------------

    async def create_order(
        self,
        user_id: str,
        shipping_address: str,
        status: str = OrderStatus.PENDING,
    ) -> Order:
        row = {
            "order_status": status,
            "profiles_id": user_id,
            "shipping_address": shipping_address,
        }
        result = await self._db.insert(TABLE_ORDERS, [row])
        created = first_row(unwrap(result, TABLE_ORDERS, "insert"))
        if not created:
            raise BackendException("Order insert returned no record", table=TABLE_ORDERS)
        return parse_one(Order, created, TABLE_ORDERS)

    async def add_order_lines(self, lines: Iterable[OrderLine]) -> None:
        rows = [line.to_row() for line in lines]
        if not rows:
            return
        result = await self._db.insert(TABLE_ORDER_PRODUCTS, rows, returning=False)
        unwrap(result, TABLE_ORDER_PRODUCTS, "insert")

    async def get_order(self, order_id: int) -> Order:
        result = await self._db.select(TABLE_ORDERS, filters={"id": order_id}, limit=1)
        row = first_row(unwrap(result, TABLE_ORDERS, "load"))
        if row is None:
            raise RecordNotFoundException(TABLE_ORDERS, order_id)
        return parse_one(Order, row, TABLE_ORDERS)

    async def list_orders(self, user_id: str | None = None) -> list[Order]:
        filters = {"profiles_id": user_id} if user_id else None
        result = await self._db.select(TABLE_ORDERS, filters=filters, order="created_at.desc")
        return parse_many(Order, unwrap(result, TABLE_ORDERS, "load"), TABLE_ORDERS)

    async def list_order_lines(self, order_ids: Iterable[int]) -> list[OrderLine]:
        ids = sorted({int(order_id) for order_id in order_ids})
        if not ids:
            return []
        result = await self._db.select(TABLE_ORDER_PRODUCTS, filters={"order_id": ids})
        return parse_many(OrderLine, unwrap(result, TABLE_ORDER_PRODUCTS, "load"), TABLE_ORDER_PRODUCTS)

    async def update_order_status(self, order_id: int, status: str) -> None:
        result = await self._db.update(TABLE_ORDERS, {"order_status": status}, filters={"id": order_id})
        unwrap(result, TABLE_ORDERS, "update")

    async def delete_order(self, order_id: int) -> None:
        result = await self._db.delete(TABLE_ORDER_PRODUCTS, filters={"order_id": order_id})
        unwrap(result, TABLE_ORDER_PRODUCTS, "delete")
        result = await self._db.delete(TABLE_ORDERS, filters={"id": order_id})
        unwrap(result, TABLE_ORDERS, "delete")
