"""Order and order line entity models."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from teastore.domain.order import OrderStatus


class OrderLine(BaseModel):
    """One ``order_products`` row; price is the unit price charged at order time."""

    id: int | None = Field(None, description="Line ID (auto-generated)")
    order_id: int = Field(..., description="Owning order ID")
    product_name: str = Field(..., description="Product name frozen at order time")
    product_quantity: int = Field(..., ge=1, description="Ordered quantity")
    product_price: Decimal = Field(..., ge=0, description="Charged unit price")

    class Config:
        """Pydantic config."""

        from_attributes = True
        extra = "ignore"

    @property
    def line_total(self) -> Decimal:
        return self.product_price * self.product_quantity

    def to_row(self) -> dict:
        """Convert to a row for ``order_products`` insertion."""
        return {
            "order_id": self.order_id,
            "product_name": self.product_name,
            "product_quantity": self.product_quantity,
            "product_price": float(self.product_price),
        }


class Order(BaseModel):
    """One ``orders`` row, optionally with its lines attached."""

    id: int = Field(..., description="Order ID")
    order_status: str = Field(OrderStatus.PENDING, description="Order lifecycle status")
    profiles_id: str | None = Field(None, description="Owning user ID")
    shipping_address: str | None = Field(None, description="Delivery address")
    created_at: datetime | None = Field(None, description="Creation timestamp")
    lines: list[OrderLine] = Field(default_factory=list, description="Order lines")

    class Config:
        """Pydantic config."""

        from_attributes = True
        extra = "ignore"

    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.product_quantity for line in self.lines)
