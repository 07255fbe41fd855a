"""
Checkout orchestrator - turns the cart into a paid, persisted order.

Flow:
- initialize: create a payment intent for the discounted cart total and
  initialize the payment sheet with it (Idle -> Initializing -> ReadyToPay)
- pay: look up the shipping address, present the sheet, persist the order
  and clear the cart (ReadyToPay -> Presenting -> Succeeded/Canceled/Failed)

A payment handle is bound to the cart content it was created for. Any
content change (line count, quantity or price) makes it stale and ``pay``
re-initializes before presenting, so a stale total is never charged.

When the payment goes through but the order cannot be saved, the session
keeps the snapshot, the cart is left untouched, and further payments are
refused until ``retry_order_save`` succeeds or ``reset`` is called. Ending
the customer session never drops such a pending order.

The session object is never replaced while a call is in flight; a reset
requested meanwhile is applied once the call returns.
"""
from __future__ import annotations

import asyncio
from typing import Any, Protocol

from teastore.application.orders.place_order import place_order
from teastore.core.exceptions import (
    AuthException,
    BackendException,
    PaymentProviderException,
    TeaStoreException,
)
from teastore.core.order_math import to_minor_units
from teastore.core.subscriptions import Subscription
from teastore.domain.checkout import CheckoutResult, CheckoutSession, CheckoutStatus, can_transition
from teastore.infra.db.orders_repo import OrdersRepository
from teastore.integrations.payment_service import PaymentService, PaymentSheet, PaymentSheetStatus
from teastore.logging_config import logger
from teastore.services.cart_store import CartStore

MAX_REINITIALIZE_ATTEMPTS = 3


class SessionProvider(Protocol):
    async def get_current_session(self) -> Any | None: ...


class CheckoutStateError(TeaStoreException):
    """Internal transition outside the checkout state machine."""


class CheckoutOrchestrator:
    """Single in-flight checkout per customer session."""

    def __init__(
        self,
        cart: CartStore,
        payments: PaymentService,
        sheet: PaymentSheet,
        orders: OrdersRepository,
        auth: SessionProvider,
        *,
        merchant_display_name: str | None = None,
        appearance: dict[str, Any] | None = None,
    ):
        self._cart = cart
        self._payments = payments
        self._sheet = sheet
        self._orders = orders
        self._auth = auth
        self._merchant_display_name = merchant_display_name or payments.merchant_display_name
        self._appearance = appearance if appearance is not None else payments.appearance
        self._session = CheckoutSession()
        self._busy = False
        self._idle = asyncio.Event()
        self._idle.set()
        self._reset_requested = False
        self._closed = False
        self._cart_subscription: Subscription | None = None

    @property
    def session(self) -> CheckoutSession:
        return self._session

    @property
    def status(self) -> CheckoutStatus:
        return self._session.status

    @property
    def busy(self) -> bool:
        return self._busy

    # ---------------- lifecycle ----------------

    def start(self) -> None:
        """Watch the cart so content changes invalidate the payment handle."""
        self._closed = False
        if self._cart_subscription is None:
            self._cart_subscription = self._cart.subscribe(self._on_cart_changed)

    def close(self) -> None:
        """Release the cart subscription; pending calls will not present the sheet."""
        self._closed = True
        if self._cart_subscription is not None:
            self._cart_subscription.unsubscribe()
            self._cart_subscription = None

    def reset(self) -> None:
        """
        Forget the current attempt, including an unreconciled payment.

        While a call is in flight the reset is deferred until it returns, and
        a payment captured by that call is kept.
        """
        if self._busy:
            self._reset_requested = True
            return
        if self._session.order_pending:
            logger.warning(
                "Checkout reset with unsaved order for paid amount %s (order %s)",
                self._session.amount_minor,
                self._session.order_id,
            )
        self._session = CheckoutSession()

    def end_session(self) -> bool:
        """
        Drop the attempt when the customer session ends.

        A captured payment whose order is not saved yet is kept for
        ``retry_order_save``. Returns False when the session was kept.
        """
        if self._busy:
            self._reset_requested = True
            return False
        if self._session.order_pending:
            logger.error(
                "Session ended with unsaved order for paid amount %s (user %s); kept for retry",
                self._session.amount_minor,
                self._session.user_id,
            )
            return False
        self._session = CheckoutSession()
        return True

    async def wait_idle(self) -> None:
        while self._busy:
            await self._idle.wait()

    def _enter(self) -> None:
        self._busy = True
        self._idle.clear()

    def _leave(self) -> None:
        self._busy = False
        if self._reset_requested:
            self._reset_requested = False
            self.end_session()
        self._idle.set()

    def _on_cart_changed(self, cart: CartStore) -> None:
        if self._busy or self._session.order_pending:
            return
        if self._session.payment_handle is None:
            return
        if self._session.cart_fingerprint == cart.fingerprint():
            return
        logger.info("Cart changed; payment handle invalidated")
        self._session.drop_handle()
        self._transition(CheckoutStatus.IDLE)

    # ---------------- helpers ----------------

    def _transition(self, target: CheckoutStatus) -> None:
        current = self._session.status
        if not can_transition(current, target):
            raise CheckoutStateError(f"Checkout transition {current.value} -> {target.value} is not allowed")
        if current != target:
            self._session.history.append(target)
        self._session.status = target

    def _result(
        self,
        ok: bool,
        error_key: str | None = None,
        message: str | None = None,
        *,
        order_id: int | None = None,
        silent: bool = False,
    ) -> CheckoutResult:
        return CheckoutResult(
            ok=ok,
            status=self._session.status,
            error_key=error_key,
            message=message,
            order_id=order_id,
            silent=silent,
        )

    def _handle_is_fresh(self) -> bool:
        return (
            self._session.payment_handle is not None
            and self._session.status in (CheckoutStatus.READY_TO_PAY, CheckoutStatus.PRESENTING)
            and self._session.cart_fingerprint == self._cart.fingerprint()
        )

    async def _current_user_id(self) -> str | None:
        current = await self._auth.get_current_session()
        if current is None:
            return None
        return getattr(current, "user_id", None)

    def _guard(self) -> CheckoutResult | None:
        if self._busy:
            return self._result(False, "checkout_in_progress")
        if self._session.order_pending:
            return self._result(False, "reconciliation_required")
        return None

    # ---------------- initialize ----------------

    async def initialize(self) -> CheckoutResult:
        """Obtain a payment handle for the current cart content."""
        blocked = self._guard()
        if blocked is not None:
            return blocked
        self._enter()
        try:
            return await self._initialize()
        finally:
            self._leave()

    async def _initialize(self) -> CheckoutResult:
        snapshot = self._cart.items()
        if not snapshot:
            if self._session.status in (CheckoutStatus.READY_TO_PAY, CheckoutStatus.PRESENTING):
                self._session.drop_handle()
                self._transition(CheckoutStatus.IDLE)
            return self._result(False, "cart_empty")

        fingerprint = self._cart.fingerprint()
        amount_minor = to_minor_units(self._cart.total())
        line_refs = [{"id": item.id, "quantity": item.quantity} for item in snapshot]

        self._session.drop_handle()
        self._transition(CheckoutStatus.INITIALIZING)
        try:
            params = await self._payments.create_payment_intent(amount_minor, line_refs)
        except PaymentProviderException as exc:
            logger.error("Payment initialization failed: %s", exc.message)
            self._transition(CheckoutStatus.FAILED)
            return self._result(False, "init_failed", exc.message)

        try:
            error = await self._sheet.initialize(
                params,
                merchant_display_name=self._merchant_display_name,
                appearance=self._appearance,
            )
        except PaymentProviderException as exc:
            logger.error("Payment sheet initialization failed: %s", exc.message)
            self._transition(CheckoutStatus.FAILED)
            return self._result(False, "init_failed", exc.message)
        if error is not None:
            logger.error("Payment sheet initialization failed: %s", error.message)
            self._transition(CheckoutStatus.FAILED)
            return self._result(False, "init_failed", error.message)

        self._session.cart_snapshot = snapshot
        self._session.cart_fingerprint = fingerprint
        self._session.amount_minor = amount_minor
        self._session.payment_handle = params
        self._transition(CheckoutStatus.READY_TO_PAY)
        logger.info("Payment sheet ready for %s minor units (%s lines)", amount_minor, len(snapshot))
        return self._result(True)

    async def _ensure_fresh_handle(self) -> CheckoutResult | None:
        attempts = 0
        while not self._handle_is_fresh():
            if attempts >= MAX_REINITIALIZE_ATTEMPTS:
                if self._session.status == CheckoutStatus.PRESENTING:
                    self._transition(CheckoutStatus.READY_TO_PAY)
                return self._result(False, "cart_changed")
            attempts += 1
            initialized = await self._initialize()
            if not initialized.ok:
                return initialized
        return None

    # ---------------- pay ----------------

    async def pay(self) -> CheckoutResult:
        """Run the address check, payment sheet and order persistence."""
        blocked = self._guard()
        if blocked is not None:
            return blocked
        self._enter()
        try:
            return await self._pay()
        finally:
            self._leave()

    async def _pay(self) -> CheckoutResult:
        if self._cart.is_empty():
            return self._result(False, "cart_empty")

        try:
            user_id = await self._current_user_id()
        except AuthException as exc:
            return self._result(False, "sign_in_required", exc.message)
        if not user_id:
            return self._result(False, "sign_in_required")

        stale = await self._ensure_fresh_handle()
        if stale is not None:
            return stale
        if self._closed:
            return self._result(False, "closed", silent=True)

        self._transition(CheckoutStatus.PRESENTING)
        try:
            address = await self._orders.get_shipping_address(user_id)
        except BackendException as exc:
            self._transition(CheckoutStatus.READY_TO_PAY)
            return self._result(False, "profile_unavailable", exc.message)
        if not address:
            self._transition(CheckoutStatus.READY_TO_PAY)
            return self._result(False, "address_required")
        if self._closed:
            self._transition(CheckoutStatus.READY_TO_PAY)
            return self._result(False, "closed", silent=True)

        self._session.shipping_address = address
        self._session.user_id = user_id

        # the cart may have changed while the address was loading
        if not self._handle_is_fresh():
            stale = await self._ensure_fresh_handle()
            if stale is not None:
                return stale
            self._transition(CheckoutStatus.PRESENTING)

        try:
            outcome = await self._sheet.present()
        except PaymentProviderException as exc:
            self._session.drop_handle()
            self._transition(CheckoutStatus.FAILED)
            return self._result(False, "payment_failed", exc.message)

        if outcome.status == PaymentSheetStatus.CANCELED:
            self._transition(CheckoutStatus.CANCELED)
            self._transition(CheckoutStatus.READY_TO_PAY)
            return self._result(False, "canceled", silent=True)

        if outcome.status == PaymentSheetStatus.FAILED:
            message = outcome.error.message if outcome.error else None
            logger.warning("Payment failed: %s", message)
            self._session.drop_handle()
            self._transition(CheckoutStatus.FAILED)
            return self._result(False, "payment_failed", message)

        logger.info("Payment of %s minor units captured for user %s", self._session.amount_minor, user_id)
        return await self._save_order()

    async def _save_order(self) -> CheckoutResult:
        session = self._session
        placed = await place_order(
            session.user_id,
            session.shipping_address,
            session.cart_snapshot,
            repo=self._orders,
            existing_order_id=session.order_id,
        )
        if not placed.ok:
            session.order_pending = True
            session.order_id = placed.order_id
            if session.status != CheckoutStatus.FAILED:
                self._transition(CheckoutStatus.FAILED)
            logger.error(
                "Payment captured but order was not saved (user %s, amount %s): %s",
                session.user_id,
                session.amount_minor,
                placed.error_key,
            )
            return self._result(False, "order_save_failed", placed.message, order_id=placed.order_id)

        paid_fingerprint = session.cart_fingerprint
        session.order_pending = False
        session.order_id = placed.order_id
        session.drop_handle()
        self._transition(CheckoutStatus.SUCCEEDED)
        if self._cart.fingerprint() == paid_fingerprint:
            self._cart.clear()
        return self._result(True, order_id=placed.order_id, silent=self._closed)

    async def retry_order_save(self) -> CheckoutResult:
        """Persist the order of an already captured payment; never charges again."""
        if self._busy:
            return self._result(False, "checkout_in_progress")
        if not self._session.order_pending:
            return self._result(False, "nothing_to_retry")
        self._enter()
        try:
            return await self._save_order()
        finally:
            self._leave()
