"""
Payment provider integration (payment-sheet flow).

Two halves:
- server side: ``PaymentService.create_payment_intent`` asks the storefront
  API to create a payment intent and returns the sheet parameters;
- client side: a ``PaymentSheet`` supplied by the host UI initializes and
  presents the provider's confirmation sheet.

The amount is sent in minor units; line items are sent as ``{id, quantity}``
only, prices are never sent to the provider.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, Sequence

import aiohttp

from teastore.core.config import PaymentConfig
from teastore.core.exceptions import PaymentProviderException
from teastore.domain.checkout import PaymentSheetParams
from teastore.integrations.http_client import HttpClient, decode_body, error_message
from teastore.logging_config import logger

CANCELED_CODE = "Canceled"


class PaymentSheetStatus(Enum):
    """Outcome of presenting the confirmation sheet."""

    COMPLETED = "completed"
    CANCELED = "canceled"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class PaymentSheetError:
    code: str
    message: str


@dataclass(frozen=True, slots=True)
class PaymentSheetResult:
    status: PaymentSheetStatus
    error: PaymentSheetError | None = None

    @classmethod
    def completed(cls) -> PaymentSheetResult:
        return cls(PaymentSheetStatus.COMPLETED)

    @classmethod
    def from_error(cls, error: PaymentSheetError | None) -> PaymentSheetResult:
        """Map a provider error (or its absence) to a sheet outcome."""
        if error is None:
            return cls.completed()
        if error.code == CANCELED_CODE:
            return cls(PaymentSheetStatus.CANCELED, error)
        return cls(PaymentSheetStatus.FAILED, error)


class PaymentSheet(Protocol):
    """Client-side confirmation sheet implemented by the host UI."""

    async def initialize(
        self,
        params: PaymentSheetParams,
        *,
        merchant_display_name: str,
        appearance: dict[str, Any],
    ) -> PaymentSheetError | None: ...

    async def present(self) -> PaymentSheetResult: ...


class PaymentService(HttpClient):
    """Server-side half: payment intent creation through the storefront API."""

    def __init__(self, config: PaymentConfig, *, session: aiohttp.ClientSession | None = None):
        super().__init__(timeout=config.timeout, session=session)
        self._api_url = config.api_url.rstrip("/")
        self.merchant_display_name = config.merchant_display_name
        self.appearance = dict(config.appearance)

    async def create_payment_intent(
        self,
        amount_minor: int,
        line_refs: Sequence[dict[str, Any]],
    ) -> PaymentSheetParams:
        """
        Create a payment intent for ``amount_minor``.

        Args:
            amount_minor: Amount in the provider's minor currency unit
            line_refs: ``[{"id": ..., "quantity": ...}]`` per cart line

        Raises:
            PaymentProviderException: network error, rejected amount or
                malformed response
        """
        if amount_minor <= 0:
            raise PaymentProviderException(f"Invalid payment amount: {amount_minor}", code="invalid_amount")

        payload = {"amount": int(amount_minor), "cart_items": list(line_refs)}
        url = f"{self._api_url}/payment-sheet"
        try:
            session = self._get_session()
            async with session.post(
                url,
                json=payload,
                headers={"Accept": "application/json"},
            ) as resp:
                body = decode_body(await resp.text())
                if resp.status >= 400:
                    message = error_message(body, resp.status)
                    logger.error("Payment sheet params request failed: %s", message)
                    raise PaymentProviderException(message, code=f"http_{resp.status}")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Payment sheet params request error: %s", exc)
            raise PaymentProviderException(f"Payment service unavailable: {exc}", code="network") from exc

        if not isinstance(body, dict):
            raise PaymentProviderException("Unexpected payment service response", code="bad_response")
        try:
            return PaymentSheetParams.from_response(body)
        except ValueError as exc:
            raise PaymentProviderException(str(exc), code="bad_response") from exc
