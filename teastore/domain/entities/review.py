"""Review entity model (read-only)."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class Review(BaseModel):
    """Product review row from the ``reviews`` collection."""

    id: int | str = Field(..., description="Review ID")
    product_id: str | None = Field(None, description="Reviewed product")
    profiles_id: str | None = Field(None, description="Author user ID")
    rating: int = Field(5, ge=1, le=5, description="Star rating")
    comment: str = Field("", description="Review text")
    created_at: datetime | None = Field(None, description="Creation timestamp")

    class Config:
        """Pydantic config."""

        from_attributes = True
        extra = "ignore"

    @field_validator("product_id", mode="before")
    @classmethod
    def coerce_product_id(cls, v: object) -> object:
        return str(v) if v is not None else v
