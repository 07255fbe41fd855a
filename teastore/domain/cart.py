"""Cart line items and their derived discount figures."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from teastore.core import order_math
from teastore.core.constants import MIN_LINE_QUANTITY


@dataclass(frozen=True, slots=True)
class CartLineItem:
    """Single product line in the cart."""

    id: str
    product_name: str
    unit_price: Decimal
    quantity: int = MIN_LINE_QUANTITY

    @property
    def line_subtotal(self) -> Decimal:
        return order_math.line_subtotal(self.unit_price, self.quantity)

    @property
    def discount_rate(self) -> Decimal:
        return order_math.discount_rate(self.quantity)

    @property
    def charged_unit_price(self) -> Decimal:
        return order_math.discounted_unit_price(self.unit_price, self.quantity)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "product_name": self.product_name,
            "price": str(self.unit_price),
            "quantity": int(self.quantity),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartLineItem:
        raw_id = data.get("id")
        if raw_id is None or str(raw_id) == "":
            raise ValueError("cart line without id")
        try:
            quantity = int(data.get("quantity", MIN_LINE_QUANTITY))
        except (TypeError, ValueError):
            quantity = MIN_LINE_QUANTITY
        return cls(
            id=str(raw_id),
            product_name=str(data.get("product_name") or ""),
            unit_price=order_math.to_decimal(data.get("price")),
            quantity=max(quantity, MIN_LINE_QUANTITY),
        )


@dataclass(frozen=True, slots=True)
class DetailedCartItem:
    """Cart line enriched with the bulk discount, computed on read."""

    item: CartLineItem
    discount: Decimal
    discounted_total: Decimal

    @classmethod
    def from_item(cls, item: CartLineItem) -> DetailedCartItem:
        return cls(
            item=item,
            discount=order_math.line_discount(item.unit_price, item.quantity),
            discounted_total=order_math.line_discounted_total(item.unit_price, item.quantity),
        )

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def product_name(self) -> str:
        return self.item.product_name

    @property
    def unit_price(self) -> Decimal:
        return self.item.unit_price

    @property
    def quantity(self) -> int:
        return self.item.quantity
