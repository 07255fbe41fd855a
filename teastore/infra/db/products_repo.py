"""Products and reviews repository."""
from __future__ import annotations

from typing import Any

from teastore.core.constants import TABLE_PRODUCTS, TABLE_REVIEWS
from teastore.core.exceptions import BackendException, RecordNotFoundException
from teastore.domain.entities import Product, Review
from teastore.infra.db.base import first_row, parse_many, parse_one, unwrap
from teastore.integrations.supabase_data import SupabaseDataClient


class ProductsRepository:
    def __init__(self, db: SupabaseDataClient):
        self._db = db

    async def list_products(self, *, only_available: bool = False, category: str | None = None) -> list[Product]:
        filters: dict[str, Any] = {}
        if only_available:
            filters["status"] = True
        if category:
            filters["category"] = category
        result = await self._db.select(TABLE_PRODUCTS, filters=filters or None, order="product_name.asc")
        return parse_many(Product, unwrap(result, TABLE_PRODUCTS, "load"), TABLE_PRODUCTS)

    async def get_product(self, product_id: str) -> Product:
        result = await self._db.select(TABLE_PRODUCTS, filters={"id": product_id}, limit=1)
        row = first_row(unwrap(result, TABLE_PRODUCTS, "load"))
        if row is None:
            raise RecordNotFoundException(TABLE_PRODUCTS, product_id)
        return parse_one(Product, row, TABLE_PRODUCTS)

    async def insert_product(self, values: dict[str, Any]) -> Product:
        result = await self._db.insert(TABLE_PRODUCTS, [values])
        row = first_row(unwrap(result, TABLE_PRODUCTS, "insert"))
        if not row:
            raise BackendException("Product insert returned no record", table=TABLE_PRODUCTS)
        return parse_one(Product, row, TABLE_PRODUCTS)

    async def update_product(self, product_id: str, values: dict[str, Any]) -> None:
        result = await self._db.update(TABLE_PRODUCTS, values, filters={"id": product_id})
        unwrap(result, TABLE_PRODUCTS, "update")

    async def delete_product(self, product_id: str) -> None:
        result = await self._db.delete(TABLE_PRODUCTS, filters={"id": product_id})
        unwrap(result, TABLE_PRODUCTS, "delete")

    async def list_reviews(self, product_id: str) -> list[Review]:
        result = await self._db.select(
            TABLE_REVIEWS,
            filters={"product_id": product_id},
            order="created_at.desc",
        )
        return parse_many(Review, unwrap(result, TABLE_REVIEWS, "load"), TABLE_REVIEWS)
