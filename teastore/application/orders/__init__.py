"""Order use cases."""

from .place_order import PlaceOrderResult, build_order_lines, place_order
from .update_status import OrderStatusResult, update_order_status

__all__ = [
    "OrderStatusResult",
    "PlaceOrderResult",
    "build_order_lines",
    "place_order",
    "update_order_status",
]
