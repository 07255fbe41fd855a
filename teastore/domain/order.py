"""Order statuses and transition rules (single source of truth)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping


class OrderStatus:
    """Order lifecycle statuses as stored in ``orders.order_status``."""

    PENDING = "Pending"
    ACCEPTED = "Accepted"
    PICKED = "Picked"
    DELIVERED = "Delivered"

    ALL = (PENDING, ACCEPTED, PICKED, DELIVERED)

    @classmethod
    def normalize(cls, status: str | None) -> str | None:
        if status is None:
            return None
        cleaned = str(status).strip().lower()
        for value in cls.ALL:
            if value.lower() == cleaned:
                return value
        return str(status).strip()


ALLOWED_TRANSITIONS: Mapping[str, frozenset[str]] = {
    OrderStatus.PENDING: frozenset(
        {
            OrderStatus.ACCEPTED,
            OrderStatus.PICKED,
            OrderStatus.DELIVERED,
        }
    ),
    OrderStatus.ACCEPTED: frozenset(
        {
            OrderStatus.PICKED,
            OrderStatus.DELIVERED,
        }
    ),
    OrderStatus.PICKED: frozenset({OrderStatus.DELIVERED}),
    OrderStatus.DELIVERED: frozenset(),
}

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED})


@dataclass(frozen=True, slots=True)
class TransitionValidationResult:
    allowed: bool
    reason: str | None = None


def validate_order_transition(*, current_status: str | None, target_status: str) -> TransitionValidationResult:
    """Validate an admin status change against the transition matrix."""
    if not target_status:
        return TransitionValidationResult(False, "New status is not specified.")

    target = OrderStatus.normalize(target_status)
    current = OrderStatus.normalize(current_status)

    if target not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported status: {target}")

    if current is not None and current not in ALLOWED_TRANSITIONS:
        return TransitionValidationResult(False, f"Unsupported current status: {current}")

    if current == target:
        return TransitionValidationResult(True)

    if current in TERMINAL_STATUSES:
        return TransitionValidationResult(False, f"Cannot change terminal status '{current}'.")

    if current is not None and target not in ALLOWED_TRANSITIONS[current]:
        return TransitionValidationResult(False, f"Transition '{current} -> {target}' is not allowed.")

    return TransitionValidationResult(True)
