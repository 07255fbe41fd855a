"""Repositories over the hosted backend collections."""

from .orders_repo import OrdersRepository
from .products_repo import ProductsRepository

__all__ = ["OrdersRepository", "ProductsRepository"]
