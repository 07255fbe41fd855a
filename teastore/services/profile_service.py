"""Profile reads and shipping address updates."""
from __future__ import annotations

from teastore.core.exceptions import ValidationException
from teastore.domain.entities import Profile
from teastore.infra.db.orders_repo import OrdersRepository


class ProfileService:
    def __init__(self, repo: OrdersRepository):
        self._repo = repo

    async def get_profile(self, user_id: str) -> Profile | None:
        return await self._repo.get_profile(user_id)

    async def update_address(self, user_id: str, address: str) -> Profile:
        cleaned = " ".join((address or "").split())
        if not cleaned:
            raise ValidationException("Address cannot be empty")
        return await self._repo.upsert_profile(user_id, address=cleaned)

    async def update_profile(
        self,
        user_id: str,
        *,
        full_name: str | None = None,
        username: str | None = None,
        phonenumber: str | None = None,
        address: str | None = None,
    ) -> Profile:
        values = {
            key: value.strip()
            for key, value in {
                "full_name": full_name,
                "username": username,
                "phonenumber": phonenumber,
                "address": address,
            }.items()
            if value is not None
        }
        return await self._repo.upsert_profile(user_id, **values)
