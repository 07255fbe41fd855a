"""Checkout and cart message builders for the UI layer."""
from __future__ import annotations

from teastore.core.constants import CURRENCY_LABEL
from teastore.core.order_math import format_amount
from teastore.domain.checkout import CheckoutResult
from teastore.services.cart_store import CartStore

CHECKOUT_MESSAGES: dict[str, tuple[str, str]] = {
    "cart_empty": ("Cart Empty", "Add items before checking out."),
    "sign_in_required": ("Sign In Required", "Please sign in to place an order."),
    "address_required": ("Address Required", "Please add a shipping address in your profile."),
    "profile_unavailable": ("Profile Unavailable", "Could not load your shipping address. Try again in a moment."),
    "init_failed": ("Initialization Failed", "Payment could not be prepared. Try again in a moment."),
    "cart_changed": ("Cart Changed", "Your cart changed during checkout. Please review it and try again."),
    "checkout_in_progress": ("Payment In Progress", "Please wait for the current payment to finish."),
    "payment_failed": ("Payment Failed", "The payment did not go through."),
    "order_save_failed": (
        "Order Save Failed",
        "Payment succeeded, but saving your order failed. Do not pay again; "
        "please contact support so we can complete your order.",
    ),
    "reconciliation_required": (
        "Order Pending",
        "Your last payment went through but the order is not saved yet. "
        "Please retry saving it or contact support before paying again.",
    ),
    "nothing_to_retry": ("Nothing To Retry", "There is no unsaved order."),
}

ORDER_PLACED = ("Order Placed", "Your order was successful.")


def build_checkout_message(result: CheckoutResult) -> tuple[str, str] | None:
    """Alert title and text for a checkout result; ``None`` when nothing should be shown."""
    if result.silent:
        return None
    if result.ok:
        if result.order_id is None:
            return None
        return ORDER_PLACED
    title, text = CHECKOUT_MESSAGES.get(result.error_key or "", ("Payment Error", "Unknown error"))
    # provider/backend text is shown verbatim, except after a captured payment
    if result.message and result.error_key in ("payment_failed", "init_failed"):
        text = result.message
    return title, text


def build_checkout_button_label(cart: CartStore) -> str:
    return f"Checkout ({CURRENCY_LABEL}{format_amount(cart.total())})"


def build_cart_lines(cart: CartStore) -> list[str]:
    lines = []
    for detail in cart.detailed_items():
        text = f"{detail.product_name} x{detail.quantity}: {CURRENCY_LABEL}{format_amount(detail.discounted_total)}"
        if detail.discount:
            text += f" (saved {CURRENCY_LABEL}{format_amount(detail.discount)})"
        lines.append(text)
    return lines
