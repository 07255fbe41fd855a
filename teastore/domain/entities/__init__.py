"""Domain entities package."""

from .order import Order, OrderLine
from .product import Product
from .profile import Profile
from .review import Review

__all__ = [
    "Product",
    "Order",
    "OrderLine",
    "Profile",
    "Review",
]
