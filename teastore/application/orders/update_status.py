"""Use case: admin changes the status of an order."""
from __future__ import annotations

from dataclasses import dataclass

from teastore.core.exceptions import BackendException, RecordNotFoundException
from teastore.domain.order import OrderStatus, validate_order_transition
from teastore.infra.db.orders_repo import OrdersRepository


@dataclass
class OrderStatusResult:
    ok: bool
    error_key: str | None = None
    reason: str | None = None
    status: str | None = None


async def update_order_status(order_id: int, target_status: str, *, repo: OrdersRepository) -> OrderStatusResult:
    try:
        order = await repo.get_order(order_id)
    except RecordNotFoundException:
        return OrderStatusResult(False, "not_found")
    except BackendException as exc:
        return OrderStatusResult(False, "db_error", reason=exc.message)

    check = validate_order_transition(current_status=order.order_status, target_status=target_status)
    if not check.allowed:
        return OrderStatusResult(False, "transition_forbidden", reason=check.reason, status=order.order_status)

    target = OrderStatus.normalize(target_status)
    if target == OrderStatus.normalize(order.order_status):
        return OrderStatusResult(True, status=target)

    try:
        await repo.update_order_status(order_id, target)
    except BackendException as exc:
        return OrderStatusResult(False, "db_error", reason=exc.message, status=order.order_status)
    return OrderStatusResult(True, status=target)
