"""Shared helpers for line discounts, totals and minor-unit amounts."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Iterable

from teastore.core.constants import (
    BULK_DISCOUNT_MIN_QUANTITY,
    BULK_DISCOUNT_RATE,
    MINOR_UNITS_PER_MAJOR,
)

ZERO = Decimal("0")


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce a stored/backend price to Decimal; unusable values become ``default``."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if value.is_finite() else default
    try:
        result = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return default
    return result if result.is_finite() else default


def discount_rate(quantity: int) -> Decimal:
    return BULK_DISCOUNT_RATE if quantity >= BULK_DISCOUNT_MIN_QUANTITY else ZERO


def line_subtotal(unit_price: Decimal, quantity: int) -> Decimal:
    return unit_price * quantity


def line_discount(unit_price: Decimal, quantity: int) -> Decimal:
    return line_subtotal(unit_price, quantity) * discount_rate(quantity)


def line_discounted_total(unit_price: Decimal, quantity: int) -> Decimal:
    return line_subtotal(unit_price, quantity) - line_discount(unit_price, quantity)


def discounted_unit_price(unit_price: Decimal, quantity: int) -> Decimal:
    """Per-unit price actually charged for a line (frozen into order lines)."""
    return unit_price * (Decimal("1") - discount_rate(quantity))


def calc_items_total(lines: Iterable[tuple[Decimal, int]]) -> Decimal:
    total = ZERO
    for unit_price, quantity in lines:
        total += line_discounted_total(unit_price, quantity)
    return total


def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount to the provider's integer minor units."""
    scaled = to_decimal(amount) * MINOR_UNITS_PER_MAJOR
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_amount(amount: Decimal) -> str:
    return format(to_decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP), "f")
