"""Order history for customers and order management for admins."""
from __future__ import annotations

from collections import defaultdict
from decimal import Decimal

from teastore.application.orders.update_status import OrderStatusResult, update_order_status
from teastore.domain.entities import Order
from teastore.infra.db.orders_repo import OrdersRepository


class OrderHistoryService:
    def __init__(self, repo: OrdersRepository):
        self._repo = repo

    async def _with_lines(self, orders: list[Order]) -> list[Order]:
        if not orders:
            return []
        lines = await self._repo.list_order_lines(order.id for order in orders)
        by_order = defaultdict(list)
        for line in lines:
            by_order[line.order_id].append(line)
        return [order.model_copy(update={"lines": by_order.get(order.id, [])}) for order in orders]

    async def list_orders(self, user_id: str) -> list[Order]:
        """Orders of one customer, newest first, with their lines."""
        return await self._with_lines(await self._repo.list_orders(user_id))

    async def list_all_orders(self) -> list[Order]:
        """Admin: every order with its lines."""
        return await self._with_lines(await self._repo.list_orders())

    @staticmethod
    def order_total(order: Order) -> Decimal:
        return order.total

    async def delete_order(self, order_id: int) -> None:
        await self._repo.delete_order(order_id)

    async def update_order_status(self, order_id: int, status: str) -> OrderStatusResult:
        """Admin: move an order along Pending -> Accepted -> Picked -> Delivered."""
        return await update_order_status(order_id, status, repo=self._repo)
