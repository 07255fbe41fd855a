from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError

from teastore.domain.cart import CartLineItem
from teastore.domain.checkout import PaymentSheetParams
from teastore.domain.entities import Order, OrderLine, Product, Profile, Review


def test_cart_line_from_stored_dict_coerces_values() -> None:
    item = CartLineItem.from_dict({"id": 5, "product_name": "Chai", "price": "60.25", "quantity": "0"})
    assert item.id == "5"
    assert item.unit_price == Decimal("60.25")
    assert item.quantity == 1


def test_cart_line_without_id_is_rejected() -> None:
    with pytest.raises(ValueError):
        CartLineItem.from_dict({"product_name": "Chai", "price": 1})


def test_product_from_backend_row() -> None:
    product = Product.model_validate(
        {"id": 3, "product_name": "Oolong", "price": None, "status": True, "quantity": 0, "extra": "ignored"}
    )
    assert product.id == "3"
    assert product.price == 0
    assert not product.is_available


def test_product_rejects_negative_price() -> None:
    with pytest.raises(ValidationError):
        Product(id="1", product_name="Bad", price=Decimal("-1"))


def test_profile_blank_address_is_not_a_shipping_address() -> None:
    assert Profile(id="u", address="   ").shipping_address is None
    assert Profile(id="u", role=None).role == "user"
    assert Profile(id="u", role="admin").is_admin


def test_order_totals_use_frozen_line_prices() -> None:
    order = Order(
        id=1,
        lines=[
            OrderLine(order_id=1, product_name="Green Tea", product_quantity=3, product_price=Decimal("90")),
            OrderLine(order_id=1, product_name="Chai", product_quantity=1, product_price=Decimal("60")),
        ],
    )
    assert order.order_status == "Pending"
    assert order.total == Decimal("330")
    assert order.item_count == 4
    assert order.lines[0].to_row() == {
        "order_id": 1,
        "product_name": "Green Tea",
        "product_quantity": 3,
        "product_price": 90.0,
    }


def test_review_rating_bounds() -> None:
    assert Review(id=1, product_id=2, rating=4).product_id == "2"
    with pytest.raises(ValidationError):
        Review(id=1, rating=6)


def test_payment_sheet_params_require_all_keys() -> None:
    params = PaymentSheetParams.from_response({"paymentIntent": "pi", "ephemeralKey": "ek", "customer": "cus"})
    assert params.customer == "cus"
    with pytest.raises(ValueError):
        PaymentSheetParams.from_response({"paymentIntent": "pi"})
