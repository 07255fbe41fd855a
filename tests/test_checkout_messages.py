from __future__ import annotations

from teastore.domain.checkout import CheckoutResult, CheckoutStatus
from teastore.interfaces.presenters.checkout_messages import (
    ORDER_PLACED,
    build_cart_lines,
    build_checkout_button_label,
    build_checkout_message,
)
from teastore.services.cart_store import CartStore


def _failed(error_key: str, message: str | None = None) -> CheckoutResult:
    return CheckoutResult(ok=False, status=CheckoutStatus.FAILED, error_key=error_key, message=message)


def test_order_placed_message() -> None:
    result = CheckoutResult(ok=True, status=CheckoutStatus.SUCCEEDED, order_id=5)
    assert build_checkout_message(result) == ORDER_PLACED


def test_silent_results_show_nothing() -> None:
    canceled = CheckoutResult(ok=False, status=CheckoutStatus.READY_TO_PAY, error_key="canceled", silent=True)
    initialized = CheckoutResult(ok=True, status=CheckoutStatus.READY_TO_PAY)
    assert build_checkout_message(canceled) is None
    assert build_checkout_message(initialized) is None


def test_provider_message_is_shown_for_payment_failure() -> None:
    assert build_checkout_message(_failed("payment_failed", "Your card was declined.")) == (
        "Payment Failed",
        "Your card was declined.",
    )


def test_order_save_failure_tells_user_not_to_pay_again() -> None:
    title, text = build_checkout_message(_failed("order_save_failed", "Failed to insert orders: timeout"))
    assert title == "Order Save Failed"
    assert "Do not pay again" in text
    assert "timeout" not in text


def test_address_required_message() -> None:
    assert build_checkout_message(_failed("address_required")) == (
        "Address Required",
        "Please add a shipping address in your profile.",
    )


def test_unknown_error_key_falls_back() -> None:
    assert build_checkout_message(_failed("mystery")) == ("Payment Error", "Unknown error")


async def test_cart_presenters(storage) -> None:
    cart = CartStore(storage)
    for _ in range(3):
        cart.add_item({"id": 1, "product_name": "Green Tea", "price": 100})
    cart.add_item({"id": 2, "product_name": "Espresso Beans", "price": "45.5"})

    assert build_checkout_button_label(cart) == "Checkout (Rs.315.50)"
    assert build_cart_lines(cart) == [
        "Green Tea x3: Rs.270.00 (saved Rs.30.00)",
        "Espresso Beans x1: Rs.45.50",
    ]
