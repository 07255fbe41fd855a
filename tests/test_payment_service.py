from __future__ import annotations

import pytest
from aiohttp import web

from teastore.core.config import PaymentConfig
from teastore.core.exceptions import PaymentProviderException
from teastore.integrations.payment_service import (
    PaymentService,
    PaymentSheetError,
    PaymentSheetResult,
    PaymentSheetStatus,
)


def make_service(server) -> PaymentService:
    config = PaymentConfig(
        api_url=str(server.make_url("/api")),
        merchant_display_name="Tea App",
        appearance={"colors": {"primary": "#006400"}},
        timeout=5,
    )
    return PaymentService(config)


@pytest.fixture
async def payment_api(http_server):
    received: list[dict] = []
    response: dict = {
        "status": 200,
        "body": {"paymentIntent": "pi_123_secret_abc", "ephemeralKey": "ek_456", "customer": "cus_789"},
    }

    async def payment_sheet(request: web.Request) -> web.Response:
        received.append(await request.json())
        return web.json_response(response["body"], status=response["status"])

    app = web.Application()
    app.router.add_post("/api/payment-sheet", payment_sheet)
    server = await http_server(app)
    return server, received, response


async def test_create_payment_intent_posts_amount_and_line_refs(payment_api) -> None:
    server, received, _ = payment_api
    async with make_service(server) as service:
        params = await service.create_payment_intent(27000, [{"id": "1", "quantity": 3}])

    assert received == [{"amount": 27000, "cart_items": [{"id": "1", "quantity": 3}]}]
    assert params.payment_intent == "pi_123_secret_abc"
    assert params.ephemeral_key == "ek_456"
    assert params.customer == "cus_789"
    assert service.merchant_display_name == "Tea App"


async def test_provider_error_is_raised_with_status_code(payment_api) -> None:
    server, _, response = payment_api
    response["status"] = 400
    response["body"] = {"error": "Amount must be at least 50 cents"}

    async with make_service(server) as service:
        with pytest.raises(PaymentProviderException) as exc_info:
            await service.create_payment_intent(10, [{"id": "1", "quantity": 1}])

    assert exc_info.value.code == "http_400"
    assert "at least 50 cents" in exc_info.value.message


async def test_incomplete_response_is_rejected(payment_api) -> None:
    server, _, response = payment_api
    response["body"] = {"paymentIntent": "pi_1"}

    async with make_service(server) as service:
        with pytest.raises(PaymentProviderException) as exc_info:
            await service.create_payment_intent(100, [])

    assert exc_info.value.code == "bad_response"


async def test_non_positive_amount_is_never_sent(payment_api) -> None:
    server, received, _ = payment_api
    async with make_service(server) as service:
        with pytest.raises(PaymentProviderException) as exc_info:
            await service.create_payment_intent(0, [])

    assert exc_info.value.code == "invalid_amount"
    assert received == []


async def test_unreachable_api_raises_network_error() -> None:
    config = PaymentConfig(api_url="http://127.0.0.1:9/api", merchant_display_name="Tea App", timeout=2)
    async with PaymentService(config) as service:
        with pytest.raises(PaymentProviderException) as exc_info:
            await service.create_payment_intent(100, [{"id": "1", "quantity": 1}])

    assert exc_info.value.code == "network"


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (None, PaymentSheetStatus.COMPLETED),
        (PaymentSheetError("Canceled", "The payment flow has been canceled"), PaymentSheetStatus.CANCELED),
        (PaymentSheetError("Failed", "Card declined"), PaymentSheetStatus.FAILED),
    ],
)
def test_sheet_result_from_error(error, status) -> None:
    assert PaymentSheetResult.from_error(error).status == status
