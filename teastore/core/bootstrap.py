"""Application bootstrap wiring storage, backend clients and services."""
from __future__ import annotations

from dataclasses import dataclass

from teastore.core.config import Settings
from teastore.infra.db.orders_repo import OrdersRepository
from teastore.infra.db.products_repo import ProductsRepository
from teastore.integrations.kv_store import KeyValueStore, create_kv_store
from teastore.integrations.payment_service import PaymentService, PaymentSheet
from teastore.integrations.supabase_auth import SupabaseAuthClient
from teastore.integrations.supabase_data import SupabaseDataClient
from teastore.logging_config import logger, setup_logging
from teastore.services.cart_store import CartStore
from teastore.services.catalog_service import CatalogService
from teastore.services.checkout_service import CheckoutOrchestrator
from teastore.services.order_history_service import OrderHistoryService
from teastore.services.profile_service import ProfileService
from teastore.services.session import SessionScope


@dataclass
class Storefront:
    """Everything a screen may need, passed explicitly instead of globals."""

    settings: Settings
    storage: KeyValueStore
    auth: SupabaseAuthClient
    db: SupabaseDataClient
    payments: PaymentService
    cart: CartStore
    checkout: CheckoutOrchestrator
    catalog: CatalogService
    orders: OrderHistoryService
    profiles: ProfileService

    def session_scope(self) -> SessionScope:
        return SessionScope(self.auth, self.cart, checkout=self.checkout)

    async def close(self) -> None:
        self.checkout.close()
        await self.cart.flush()
        await self.db.close()
        await self.auth.close()
        await self.payments.close()
        close_storage = getattr(self.storage, "close", None)
        if close_storage is not None:
            await close_storage()


def build_storefront(
    settings: Settings,
    payment_sheet: PaymentSheet,
    *,
    storage: KeyValueStore | None = None,
) -> Storefront:
    """Create runtime components from configuration; the host UI supplies the payment sheet."""
    setup_logging(settings.log_level)

    storage = storage if storage is not None else create_kv_store(settings.redis_url)
    auth = SupabaseAuthClient(settings.supabase, storage)
    db = SupabaseDataClient(settings.supabase, token_provider=auth.access_token)
    payments = PaymentService(settings.payment)

    orders_repo = OrdersRepository(db)
    cart = CartStore(storage, storage_key=settings.cart_storage_key)
    checkout = CheckoutOrchestrator(cart, payments, payment_sheet, orders_repo, auth)

    logger.info("Storefront initialized (backend %s)", settings.supabase.url)
    return Storefront(
        settings=settings,
        storage=storage,
        auth=auth,
        db=db,
        payments=payments,
        cart=cart,
        checkout=checkout,
        catalog=CatalogService(ProductsRepository(db)),
        orders=OrderHistoryService(orders_repo),
        profiles=ProfileService(orders_repo),
    )
