"""Use case: persist a paid cart as an order with its lines."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from teastore.core.exceptions import BackendException
from teastore.domain.cart import CartLineItem
from teastore.domain.entities import OrderLine
from teastore.domain.order import OrderStatus
from teastore.infra.db.orders_repo import OrdersRepository
from teastore.logging_config import logger


@dataclass
class PlaceOrderResult:
    ok: bool
    error_key: str | None = None
    order_id: int | None = None
    message: str | None = None


def build_order_lines(order_id: int, items: Sequence[CartLineItem]) -> list[OrderLine]:
    """One line per cart item, priced at the discounted unit price."""
    return [
        OrderLine(
            order_id=order_id,
            product_name=item.product_name,
            product_quantity=item.quantity,
            product_price=item.charged_unit_price,
        )
        for item in items
    ]


async def place_order(
    user_id: str,
    shipping_address: str,
    items: Sequence[CartLineItem],
    *,
    repo: OrdersRepository,
    existing_order_id: int | None = None,
) -> PlaceOrderResult:
    """
    Insert the order record (unless ``existing_order_id`` is given) and its lines.

    ``existing_order_id`` lets a retry reuse an order header that was saved
    before the line insert failed.
    """
    if not items:
        return PlaceOrderResult(False, "empty_order")

    order_id = existing_order_id
    if order_id is None:
        try:
            order = await repo.create_order(user_id, shipping_address, OrderStatus.PENDING)
        except BackendException as exc:
            logger.error("Order insert failed for user %s: %s", user_id, exc.message)
            return PlaceOrderResult(False, "order_insert_failed", message=exc.message)
        order_id = order.id

    try:
        await repo.add_order_lines(build_order_lines(order_id, items))
    except BackendException as exc:
        logger.error("Order lines insert failed for order %s: %s", order_id, exc.message)
        return PlaceOrderResult(False, "order_lines_insert_failed", order_id=order_id, message=exc.message)

    logger.info("Order %s placed for user %s (%s lines)", order_id, user_id, len(items))
    return PlaceOrderResult(True, order_id=order_id)
