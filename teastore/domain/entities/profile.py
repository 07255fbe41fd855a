"""Profile entity model."""
from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from teastore.domain.value_objects import UserRole


class Profile(BaseModel):
    """User profile row from the ``profiles`` collection."""

    id: str = Field(..., description="Auth user ID")
    full_name: str | None = Field(None, description="Full name")
    username: str | None = Field(None, description="Public username")
    phonenumber: str | None = Field(None, description="Phone number")
    address: str | None = Field(None, description="Shipping address")
    role: UserRole = Field(UserRole.USER, description="Account role")

    class Config:
        """Pydantic config."""

        from_attributes = True
        use_enum_values = True
        extra = "ignore"

    @field_validator("role", mode="before")
    @classmethod
    def default_role(cls, v: object) -> object:
        return v or UserRole.USER

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def shipping_address(self) -> str | None:
        """Address usable for shipping, ``None`` when blank."""
        if self.address is None:
            return None
        address = self.address.strip()
        return address or None
