"""Catalog reads for customers and product CRUD for admins."""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from teastore.core import order_math
from teastore.core.exceptions import ValidationException
from teastore.domain.entities import Product, Review
from teastore.domain.value_objects import ProductCategory
from teastore.infra.db.products_repo import ProductsRepository
from teastore.logging_config import logger


class CatalogService:
    """Facade over the ``products`` and ``reviews`` collections."""

    def __init__(self, repo: ProductsRepository):
        self._repo = repo

    async def list_products(self, *, only_available: bool = True, category: str | None = None) -> list[Product]:
        return await self._repo.list_products(only_available=only_available, category=category)

    async def get_product(self, product_id: str) -> Product:
        return await self._repo.get_product(product_id)

    async def list_reviews(self, product_id: str) -> list[Review]:
        return await self._repo.list_reviews(product_id)

    async def average_rating(self, product_id: str) -> float | None:
        reviews = await self.list_reviews(product_id)
        if not reviews:
            return None
        return round(sum(review.rating for review in reviews) / len(reviews), 1)

    async def add_product(
        self,
        *,
        product_name: str,
        price: Any,
        quantity: int,
        description: str = "",
        company: str = "",
        category: str = ProductCategory.TEA.value,
        status: bool = True,
    ) -> Product:
        """Admin: validate and insert a product."""
        name = (product_name or "").strip()
        if not name:
            raise ValidationException("Product name is required")
        unit_price = order_math.to_decimal(price, default=Decimal("-1"))
        if unit_price <= 0:
            raise ValidationException("Price must be a positive number")
        if quantity is None or int(quantity) < 0:
            raise ValidationException("Quantity must be zero or more")

        product = await self._repo.insert_product(
            {
                "product_name": name,
                "price": float(unit_price),
                "quantity": int(quantity),
                "description": description.strip(),
                "company": company.strip(),
                "category": category,
                "status": bool(status),
            }
        )
        logger.info("Product %s added: %s", product.id, product.product_name)
        return product

    async def set_product_status(self, product_id: str, available: bool) -> None:
        """Admin: show or hide a product in the storefront."""
        await self._repo.update_product(product_id, {"status": bool(available)})

    async def update_price(self, product_id: str, price: Any) -> None:
        """Admin: change a price; existing orders keep the price they were charged."""
        unit_price = order_math.to_decimal(price, default=Decimal("-1"))
        if unit_price <= 0:
            raise ValidationException("Price must be a positive number")
        await self._repo.update_product(product_id, {"price": float(unit_price)})

    async def delete_product(self, product_id: str) -> None:
        await self._repo.delete_product(product_id)
