# pix_checkout_api/app/services/checkout_api_client.py

import json
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from ..core.exceptions import (
    ConfigurationError,
    GatewayProtocolError,
    GatewayRejected,
    InvalidRequest,
    NetworkError,
    PaymentError,
)
from ..models.schemas import PaymentCreateRequest, PaymentCreateResponse, PaymentStatusResponse
from ..models.transaction import StatusSnapshot
from ..utilities import constants
from ..utilities.logging_config import logger


class CheckoutApiClient:
    """
    Cliente do lado do comprador para as rotas ``/payment/create`` e
    ``/payment/status`` desta API. As respostas ``{"error": ...}`` voltam
    como as mesmas exceções que o servidor levantou.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = constants.GATEWAY_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                return await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise NetworkError() from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise GatewayProtocolError(raw_body=response.text) from e

    @staticmethod
    def _raise_for_error(response: httpx.Response, data: Any) -> None:
        if response.is_success:
            return
        message = data.get("error") if isinstance(data, dict) else None
        code = response.status_code
        if code == 400:
            raise InvalidRequest(message)
        if code == 500 and message == constants.MSG_NOT_CONFIGURED:
            raise ConfigurationError(message)
        if code == 500:
            raise PaymentError(message)
        raise GatewayRejected(message, status_code=code)

    async def create_transaction(self, request: PaymentCreateRequest) -> PaymentCreateResponse:
        body = json.loads(request.model_dump_json())
        response = await self._send("POST", "/payment/create", json=body)
        data = self._decode(response)
        self._raise_for_error(response, data)
        try:
            return PaymentCreateResponse.model_validate(data)
        except ValidationError as e:
            raise GatewayProtocolError(raw_body=response.text) from e

    async def check_status(self, transaction_id: str) -> StatusSnapshot:
        response = await self._send("GET", "/payment/status", params={"id": transaction_id})
        data = self._decode(response)
        self._raise_for_error(response, data)
        try:
            parsed = PaymentStatusResponse.model_validate(data)
        except ValidationError as e:
            raise GatewayProtocolError(raw_body=response.text) from e
        logger.debug(f"🔍 Status {transaction_id}: {parsed.status.value}")
        return StatusSnapshot(
            transaction_id=parsed.transactionId,
            status=parsed.status,
            value=parsed.value,
            payment_date=parsed.paymentDate,
        )
