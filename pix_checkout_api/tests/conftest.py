import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Callable, List, Optional

import httpx
import pytest
import pytest_asyncio

from pix_checkout_api.app.core.config import Settings
from pix_checkout_api.app.dependencies import get_gateway_transport, get_settings
from pix_checkout_api.app.main import app

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeGateway:
    """Gateway Pagou simulado via httpx.MockTransport; registra as requisições."""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self._responder: Optional[Callable[[httpx.Request], httpx.Response]] = None

    def respond(self, responder: Callable[[httpx.Request], httpx.Response]) -> None:
        self._responder = responder

    def respond_json(self, payload, status_code: int = 200) -> None:
        self.respond(lambda request: httpx.Response(status_code, json=payload))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._responder is None:
            return httpx.Response(500, json={"message": "no responder configured"})
        return self._responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last_json(self):
        return json.loads(self.requests[-1].content)


def created_payload(transaction_id: str = "tx_1", **overrides):
    payload = {
        "transactionId": transaction_id,
        "status": "CREATED",
        "pixQrCode": "data:image/png;base64,iVBORw0KGgo=",
        "pixCode": "00020101021226880014br.gov.bcb.pix",
        "expirationDate": (NOW + timedelta(hours=24)).isoformat(),
        "paymentLink": f"https://pay.example/{transaction_id}",
    }
    payload.update(overrides)
    return payload


def status_payload(transaction_id: str = "tx_1", status: Optional[str] = "PAID", value: float = 150.0):
    operation = {"value": value, "paymentSettlementDate": "2026-10-19T12:05:00Z"}
    if status is not None:
        operation["status"] = status
    return {"_id": transaction_id, "operation": operation}


def payment_request_body(value=150.00):
    return {
        "value": value,
        "description": "Pedido usecalistar: 1x Legging Preta",
        "payer": {
            "fullName": "Maria Oliveira",
            "document": "123.456.789-09",
            "phone": "(11) 98765-4321",
            "email": "maria@usecalistar.com.br",
            "address": {
                "zipCode": "01310-100",
                "street": "Avenida Paulista",
                "neighborhood": "Bela Vista",
                "number": "1000",
                "complement": "apto 12",
                "city": "São Paulo",
                "state": "SP",
                "country": "BR",
            },
        },
        "items": [
            {"id": 7, "name": "Legging Preta", "quantity": 1, "price": 150.00, "size": "M", "color": "preto"}
        ],
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def test_settings():
    return Settings(
        PAGOU_SECRET_KEY="sk_test_1234567890",
        PAGOU_API_URL="https://gateway.test",
        STORE_NAME="usecalistar",
        FREE_SHIPPING_THRESHOLD=Decimal("299.00"),
        SHIPPING_COST=Decimal("19.90"),
    )


@pytest.fixture
def override_app(test_settings, fake_gateway):
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_gateway_transport] = lambda: fake_gateway.transport
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(override_app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=override_app), base_url="http://test") as c:
        yield c
