from decimal import Decimal

from teastore.core.order_math import (
    calc_items_total,
    discounted_unit_price,
    format_amount,
    line_discount,
    line_discounted_total,
    to_decimal,
    to_minor_units,
)


def test_discount_starts_at_three_units() -> None:
    assert line_discount(Decimal("100"), 2) == 0
    assert line_discount(Decimal("100"), 3) == Decimal("30")
    assert line_discounted_total(Decimal("100"), 3) == Decimal("270")


def test_discounted_unit_price_matches_line_total() -> None:
    unit = discounted_unit_price(Decimal("100"), 3)
    assert unit == Decimal("90")
    assert unit * 3 == line_discounted_total(Decimal("100"), 3)
    assert discounted_unit_price(Decimal("45.5"), 1) == Decimal("45.5")


def test_calc_items_total_applies_discount_per_line() -> None:
    lines = [(Decimal("100"), 3), (Decimal("50"), 2)]
    assert calc_items_total(lines) == Decimal("370")
    assert calc_items_total([]) == 0


def test_to_minor_units_rounds_half_up() -> None:
    assert to_minor_units(Decimal("270")) == 27000
    assert to_minor_units(Decimal("12.345")) == 1235
    assert to_minor_units(Decimal("0.004")) == 0


def test_to_decimal_falls_back_on_bad_input() -> None:
    assert to_decimal("12.50") == Decimal("12.50")
    assert to_decimal(None) == 0
    assert to_decimal(True) == 0
    assert to_decimal("abc", Decimal("1")) == Decimal("1")
    assert to_decimal("NaN") == 0


def test_format_amount_two_decimals() -> None:
    assert format_amount(Decimal("270")) == "270.00"
    assert format_amount(Decimal("40.955")) == "40.96"
