"""Product entity model."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class Product(BaseModel):
    """Catalog product as stored in the ``products`` collection."""

    id: str = Field(..., description="Product ID")
    product_name: str = Field(..., min_length=1, max_length=200, description="Display name")
    price: Decimal = Field(Decimal("0"), ge=0, description="Unit price")
    description: str | None = Field(None, description="Product description")
    company: str | None = Field(None, description="Brand / producer")
    category: str | None = Field(None, description="Category, e.g. Tea or Coffee")
    quantity: int | None = Field(None, ge=0, description="Units in stock")
    status: bool = Field(True, description="Available for sale")
    product_image: str | None = Field(None, description="Image URL")
    created_at: datetime | None = Field(None, description="Creation timestamp")

    class Config:
        """Pydantic config."""

        from_attributes = True
        extra = "ignore"

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: object) -> str:
        """Backend ids may be numeric; the cart keys on strings."""
        return str(v) if v is not None else v

    @field_validator("price", mode="before")
    @classmethod
    def default_price(cls, v: object) -> object:
        return Decimal("0") if v is None else v

    @property
    def is_available(self) -> bool:
        return self.status and (self.quantity is None or self.quantity > 0)
