"""Business services orchestrating domain logic."""

from .cart_store import CartStore
from .catalog_service import CatalogService
from .checkout_service import CheckoutOrchestrator
from .order_history_service import OrderHistoryService
from .profile_service import ProfileService
from .session import SessionScope

__all__ = [
    "CartStore",
    "CatalogService",
    "CheckoutOrchestrator",
    "OrderHistoryService",
    "ProfileService",
    "SessionScope",
]
