"""Checkout session state, transition rules and results."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from teastore.domain.cart import CartLineItem


class CheckoutStatus(str, Enum):
    """Checkout attempt lifecycle."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    READY_TO_PAY = "ready_to_pay"
    PRESENTING = "presenting"
    SUCCEEDED = "succeeded"
    CANCELED = "canceled"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Mapping[CheckoutStatus, frozenset[CheckoutStatus]] = {
    CheckoutStatus.IDLE: frozenset({CheckoutStatus.INITIALIZING}),
    CheckoutStatus.INITIALIZING: frozenset(
        {
            CheckoutStatus.READY_TO_PAY,
            CheckoutStatus.FAILED,
            CheckoutStatus.IDLE,
        }
    ),
    CheckoutStatus.READY_TO_PAY: frozenset(
        {
            CheckoutStatus.PRESENTING,
            CheckoutStatus.INITIALIZING,
            CheckoutStatus.IDLE,
        }
    ),
    CheckoutStatus.PRESENTING: frozenset(
        {
            CheckoutStatus.SUCCEEDED,
            CheckoutStatus.CANCELED,
            CheckoutStatus.FAILED,
            CheckoutStatus.READY_TO_PAY,
            CheckoutStatus.INITIALIZING,
            CheckoutStatus.IDLE,
        }
    ),
    CheckoutStatus.CANCELED: frozenset(
        {
            CheckoutStatus.READY_TO_PAY,
            CheckoutStatus.INITIALIZING,
            CheckoutStatus.IDLE,
        }
    ),
    CheckoutStatus.FAILED: frozenset(
        {
            CheckoutStatus.INITIALIZING,
            CheckoutStatus.SUCCEEDED,
            CheckoutStatus.IDLE,
        }
    ),
    CheckoutStatus.SUCCEEDED: frozenset(
        {
            CheckoutStatus.INITIALIZING,
            CheckoutStatus.IDLE,
        }
    ),
}


def can_transition(current: CheckoutStatus, target: CheckoutStatus) -> bool:
    return current == target or target in ALLOWED_TRANSITIONS.get(current, frozenset())


@dataclass(frozen=True, slots=True)
class PaymentSheetParams:
    """Provider-issued handle needed to confirm one payment attempt."""

    payment_intent: str
    ephemeral_key: str
    customer: str

    @classmethod
    def from_response(cls, data: Mapping[str, Any]) -> PaymentSheetParams:
        try:
            return cls(
                payment_intent=str(data["paymentIntent"]),
                ephemeral_key=str(data["ephemeralKey"]),
                customer=str(data["customer"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"incomplete payment sheet response: {exc}") from exc


@dataclass
class CheckoutSession:
    """State of the current checkout attempt."""

    status: CheckoutStatus = CheckoutStatus.IDLE
    cart_snapshot: tuple[CartLineItem, ...] = ()
    cart_fingerprint: str | None = None
    amount_minor: int = 0
    payment_handle: PaymentSheetParams | None = None
    shipping_address: str | None = None
    user_id: str | None = None
    order_pending: bool = False
    order_id: int | None = None
    history: list[CheckoutStatus] = field(default_factory=list)

    def drop_handle(self) -> None:
        self.payment_handle = None
        self.cart_fingerprint = None


@dataclass(frozen=True)
class CheckoutResult:
    """Outcome of one orchestrator call, ready to be shown by the UI."""

    ok: bool
    status: CheckoutStatus
    error_key: str | None = None
    message: str | None = None
    order_id: int | None = None
    silent: bool = False
