"""Domain package."""

from .cart import CartLineItem, DetailedCartItem
from .checkout import CheckoutResult, CheckoutSession, CheckoutStatus
from .entities import Order, OrderLine, Product, Profile, Review
from .order import OrderStatus
from .value_objects import ProductCategory, UserRole

__all__ = [
    # Entities
    "Product",
    "Order",
    "OrderLine",
    "Profile",
    "Review",
    # Cart / checkout
    "CartLineItem",
    "DetailedCartItem",
    "CheckoutSession",
    "CheckoutStatus",
    "CheckoutResult",
    # Value Objects
    "OrderStatus",
    "ProductCategory",
    "UserRole",
]
