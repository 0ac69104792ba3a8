import json

import httpx
import pytest

from pix_checkout_api.app.core.config import Settings
from pix_checkout_api.app.dependencies import get_settings

from conftest import created_payload, payment_request_body, status_payload


# ========== POST /payment/create ==========

@pytest.mark.asyncio
async def test_create_payment_returns_pix_artifacts(client, fake_gateway):
    fake_gateway.respond_json(created_payload("tx_1"))

    response = await client.post("/payment/create", json=payment_request_body(150.00))

    assert response.status_code == 200
    data = response.json()
    assert data["transactionId"] == "tx_1"
    assert data["status"] == "CREATED"
    assert data["pixCode"].startswith("000201")
    assert data["pixQrCode"].startswith("data:image/png;base64,")
    assert data["paymentLink"] == "https://pay.example/tx_1"
    assert data["expirationDate"].startswith("2026-10-20T12:00:00")


@pytest.mark.asyncio
async def test_create_payment_sends_normalized_payload(client, fake_gateway):
    fake_gateway.respond_json(created_payload("tx_1"))

    await client.post("/payment/create", json=payment_request_body(150.00))

    assert len(fake_gateway.requests) == 1
    sent = fake_gateway.requests[0]
    assert sent.method == "POST"
    assert str(sent.url) == "https://gateway.test/pix/v1/payment"
    assert sent.headers["x-api-key"] == "sk_test_1234567890"

    body = fake_gateway.last_json()
    assert body["type"] == "PIX"
    assert body["payer"]["document"] == "12345678909"
    assert body["payer"]["contact"] == {"phone": "+5511987654321", "mail": "maria@usecalistar.com.br"}
    assert body["payer"]["address"]["zipCode"] == "01310100"
    assert body["payer"]["address"]["neighboor"] == "Bela Vista"
    assert body["transaction"]["value"] == 150.0
    assert body["transaction"]["expirationTime"] == 86400
    assert body["transaction"]["externalId"].startswith("order-")


@pytest.mark.asyncio
async def test_create_payment_external_id_differs_between_submissions(client, fake_gateway):
    fake_gateway.respond_json(created_payload("tx_1"))

    await client.post("/payment/create", json=payment_request_body())
    await client.post("/payment/create", json=payment_request_body())

    first, second = (json.loads(r.content) for r in fake_gateway.requests)
    assert first["transaction"]["externalId"] != second["transaction"]["externalId"]


@pytest.mark.asyncio
async def test_create_payment_without_credential_makes_no_gateway_call(override_app, client, fake_gateway):
    override_app.dependency_overrides[get_settings] = lambda: Settings(PAGOU_SECRET_KEY=None)
    fake_gateway.respond_json(created_payload())

    response = await client.post("/payment/create", json=payment_request_body())

    assert response.status_code == 500
    assert response.json() == {"error": "Payment service is not configured"}
    assert fake_gateway.requests == []


@pytest.mark.asyncio
async def test_create_payment_propagates_gateway_rejection(client, fake_gateway):
    fake_gateway.respond_json({"message": "Documento do pagador inválido"}, status_code=422)

    response = await client.post("/payment/create", json=payment_request_body())

    assert response.status_code == 422
    assert response.json() == {"error": "Documento do pagador inválido"}


@pytest.mark.asyncio
async def test_create_payment_rejection_without_message_uses_generic_text(client, fake_gateway):
    fake_gateway.respond_json({}, status_code=503)

    response = await client.post("/payment/create", json=payment_request_body())

    assert response.status_code == 503
    assert response.json() == {"error": "Payment failed with status 503"}


@pytest.mark.asyncio
async def test_create_payment_non_json_response(client, fake_gateway):
    fake_gateway.respond(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

    response = await client.post("/payment/create", json=payment_request_body())

    assert response.status_code == 500
    assert response.json()["error"] == "Invalid response from payment service: <html>Bad Gateway</html>"


@pytest.mark.asyncio
async def test_create_payment_network_failure_returns_generic_error(client, fake_gateway):
    def _boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    fake_gateway.respond(_boom)

    response = await client.post("/payment/create", json=payment_request_body())

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
@pytest.mark.parametrize("value", [0, -10, "abc"])
async def test_create_payment_rejects_invalid_value(client, fake_gateway, value):
    response = await client.post("/payment/create", json=payment_request_body(value))

    assert response.status_code == 400
    assert "error" in response.json()
    assert fake_gateway.requests == []


@pytest.mark.asyncio
async def test_create_payment_rejects_short_document(client, fake_gateway):
    body = payment_request_body()
    body["payer"]["document"] = "123"

    response = await client.post("/payment/create", json=body)

    assert response.status_code == 400
    assert "document" in response.json()["error"]


# ========== GET /payment/status ==========

@pytest.mark.asyncio
async def test_status_requires_transaction_id(client, fake_gateway):
    response = await client.get("/payment/status")

    assert response.status_code == 400
    assert response.json() == {"error": "Transaction ID is required"}
    assert fake_gateway.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "gateway_status, expected",
    [
        ("PAID", "PAID"),
        ("ERROR", "ERROR"),
        ("EXPIRED", "EXPIRED"),
        ("WAITING_PAYMENT", "WAITING_PAYMENT"),
        ("CREATED", "WAITING_PAYMENT"),
        ("paid", "WAITING_PAYMENT"),
        (None, "WAITING_PAYMENT"),
    ],
)
async def test_status_maps_gateway_status(client, fake_gateway, gateway_status, expected):
    fake_gateway.respond_json(status_payload("tx_1", gateway_status))

    response = await client.get("/payment/status", params={"id": "tx_1"})

    assert response.status_code == 200
    data = response.json()
    assert data["transactionId"] == "tx_1"
    assert data["status"] == expected
    assert data["value"] == 150.0
    assert data["paymentDate"] == "2026-10-19T12:05:00Z"


@pytest.mark.asyncio
async def test_status_queries_transaction_endpoint(client, fake_gateway):
    fake_gateway.respond_json(status_payload("tx_1", "PAID"))

    await client.get("/payment/status", params={"id": "tx_1"})

    sent = fake_gateway.requests[0]
    assert sent.method == "GET"
    assert str(sent.url) == "https://gateway.test/pix/v1/transactions/tx_1"
    assert sent.headers["apiKey"] == "sk_test_1234567890"


@pytest.mark.asyncio
async def test_status_without_operation_is_waiting(client, fake_gateway):
    fake_gateway.respond_json({"_id": "tx_1"})

    response = await client.get("/payment/status", params={"id": "tx_1"})

    assert response.status_code == 200
    assert response.json()["status"] == "WAITING_PAYMENT"


@pytest.mark.asyncio
async def test_status_without_credential(override_app, client, fake_gateway):
    override_app.dependency_overrides[get_settings] = lambda: Settings(PAGOU_SECRET_KEY=None)

    response = await client.get("/payment/status", params={"id": "tx_1"})

    assert response.status_code == 500
    assert response.json() == {"error": "Payment service is not configured"}
    assert fake_gateway.requests == []


@pytest.mark.asyncio
async def test_status_propagates_gateway_error(client, fake_gateway):
    fake_gateway.respond_json({"message": "Transaction not found"}, status_code=404)

    response = await client.get("/payment/status", params={"id": "tx_404"})

    assert response.status_code == 404
    assert response.json() == {"error": "Transaction not found"}


@pytest.mark.asyncio
async def test_status_upstream_garbage_is_500(client, fake_gateway):
    fake_gateway.respond(lambda request: httpx.Response(200, text="not json"))

    response = await client.get("/payment/status", params={"id": "tx_1"})

    assert response.status_code == 500
    assert "error" in response.json()


# ========== HEALTH CHECK ==========

@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "OK"
