"""Customer session scope: hydrates the cart and tears it down on sign-out."""
from __future__ import annotations

import asyncio

from teastore.core.subscriptions import Subscription
from teastore.integrations.supabase_auth import AuthEvent, AuthSession, SupabaseAuthClient
from teastore.logging_config import logger
from teastore.services.cart_store import CartStore
from teastore.services.checkout_service import CheckoutOrchestrator


class SessionScope:
    """
    Async context manager owning the auth subscription for one app session.

    On enter the cart is restored from storage and session changes are
    watched; when the user signs out (or another user signs in) the cart and
    its stored copy are wiped so the next user does not inherit them. A
    running checkout is allowed to finish first, and a paid order that could
    not be saved keeps both the checkout session and the cart until it is
    retried. The subscription is released on exit.
    """

    def __init__(
        self,
        auth: SupabaseAuthClient,
        cart: CartStore,
        *,
        checkout: CheckoutOrchestrator | None = None,
    ):
        self._auth = auth
        self._cart = cart
        self._checkout = checkout
        self._subscription: Subscription | None = None
        self._teardowns: set[asyncio.Task] = set()
        self.current: AuthSession | None = None

    @property
    def user_id(self) -> str | None:
        return self.current.user_id if self.current else None

    @property
    def reconciliation_pending(self) -> bool:
        return self._checkout is not None and self._checkout.session.order_pending

    async def __aenter__(self) -> SessionScope:
        self.current = await self._auth.get_current_session()
        await self._cart.load()
        self._subscription = self._auth.on_session_change(self._on_session_change)
        if self._checkout is not None:
            self._checkout.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None
        if self._checkout is not None:
            self._checkout.close()
        await self._drain()
        await self._cart.flush()

    def _on_session_change(self, event: str, new_session: AuthSession | None) -> None:
        previous_user = self.user_id
        self.current = new_session
        new_user = new_session.user_id if new_session else None

        if event == AuthEvent.SIGNED_OUT or (previous_user and new_user != previous_user):
            task = asyncio.get_running_loop().create_task(self._end_session(previous_user))
            self._teardowns.add(task)
            task.add_done_callback(self._teardowns.discard)

    async def _end_session(self, user_id: str | None) -> None:
        if self._checkout is not None:
            await self._checkout.wait_idle()
            if not self._checkout.end_session():
                logger.warning("Session ended for user %s; cart kept until the paid order is saved", user_id)
                return
        logger.info("Session ended for user %s; clearing cart", user_id)
        await self._cart.clear_and_persist()

    async def _drain(self) -> None:
        if self._teardowns:
            await asyncio.gather(*list(self._teardowns), return_exceptions=True)

    async def sign_out(self) -> None:
        await self._auth.sign_out()
        await self._drain()
