# pix_checkout_api/app/services/gateways/pagou_client.py

import json
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ...core.exceptions import (
    ConfigurationError,
    GatewayProtocolError,
    GatewayRejected,
    InvalidRequest,
    NetworkError,
)
from ...models.schemas import PaymentCreateRequest, PaymentCreateResponse
from ...models.transaction import StatusSnapshot
from ...utilities import constants
from ...utilities.helpers import generate_external_id, parse_datetime, utcnow
from ...utilities.logging_config import logger, mask_secret
from ..qr_code import build_qr_code_data_uri
from .payment_payload_mapper import extract_error_message, map_pagou_status, map_to_pagou_payload


class PagouClient:
    """
    Cliente do gateway PIX Pagou.

    Cada operação faz exatamente uma requisição e normaliza a resposta. Sem a
    chave de API nenhuma requisição sai: ``ConfigurationError`` é lançado antes.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.pagou.ai",
        timeout: float = constants.GATEWAY_TIMEOUT,
        expiration_seconds: int = constants.PIX_EXPIRATION_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.expiration_seconds = expiration_seconds
        self._transport = transport
        self._clock = clock

    def _require_api_key(self) -> str:
        if not self.api_key:
            logger.error("❌ PAGOU_SECRET_KEY não configurada")
            raise ConfigurationError()
        return self.api_key

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                return await client.request(method, url, **kwargs)
        except httpx.RequestError as e:
            logger.error(f"❌ Erro de conexão com o gateway Pagou ({method} {url}): {e}")
            raise NetworkError() from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        raw = response.text
        try:
            return json.loads(raw)
        except ValueError as e:
            logger.error(f"❌ Resposta não-JSON do gateway Pagou (HTTP {response.status_code}): {raw!r}")
            raise GatewayProtocolError(
                constants.MSG_INVALID_RESPONSE.format(body=raw), raw_body=raw
            ) from e

    async def create_transaction(self, request: PaymentCreateRequest) -> PaymentCreateResponse:
        """
        Cria uma cobrança PIX com validade fixa de 24 horas.

        Raises:
            ConfigurationError: chave ausente (nenhuma chamada é feita)
            NetworkError: falha de transporte
            GatewayProtocolError: resposta não-JSON ou sem ``transactionId``
            GatewayRejected: status HTTP de erro (status e mensagem propagados)
        """
        api_key = self._require_api_key()
        external_id = generate_external_id()
        payload = map_to_pagou_payload(request, external_id, self.expiration_seconds)

        url = f"{self.base_url}{constants.PAGOU_CREATE_PATH}"
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "x-api-key": api_key,
        }

        logger.info(f"🚀 Criando cobrança PIX no Pagou: externalId={external_id} valor={request.value}")
        logger.debug(f"🔑 Chave utilizada: {mask_secret(api_key)}")
        logger.debug(f"📦 Payload Pagou: {payload!r}")
        logger.debug(f"🛒 Itens do pedido: {[item.model_dump() for item in request.items]!r}")

        response = await self._send("POST", url, json=payload, headers=headers)
        logger.info(f"📥 Pagou respondeu HTTP {response.status_code}")
        data = self._decode(response)

        if not response.is_success:
            message = extract_error_message(
                data, constants.MSG_CREATE_FAILED.format(status=response.status_code)
            )
            logger.error(f"❌ Pagou recusou a cobrança {external_id}: {data!r}")
            raise GatewayRejected(message, status_code=response.status_code)

        return self._normalize_created(data)

    def _normalize_created(self, data: Any) -> PaymentCreateResponse:
        if not isinstance(data, dict) or not data.get("transactionId"):
            raise GatewayProtocolError(
                "Invalid response from payment service: missing transactionId",
                raw_body=json.dumps(data, default=str),
            )

        try:
            expiration = parse_datetime(data.get("expirationDate"))
        except ValueError as e:
            raise GatewayProtocolError(
                "Invalid response from payment service: bad expirationDate",
                raw_body=json.dumps(data, default=str),
            ) from e
        if expiration is None:
            expiration = self._clock() + timedelta(seconds=self.expiration_seconds)

        pix_code = data.get("pixCode")
        pix_qr_code = data.get("pixQrCode")
        if not pix_qr_code and pix_code:
            logger.info("🖼️ Gateway não enviou imagem do QR Code, gerando localmente")
            pix_qr_code = build_qr_code_data_uri(pix_code)

        try:
            created = PaymentCreateResponse(
                transactionId=str(data["transactionId"]),
                status=data.get("status"),
                pixQrCode=pix_qr_code,
                pixCode=pix_code,
                expirationDate=expiration,
                paymentLink=data.get("paymentLink"),
            )
        except ValidationError as e:
            logger.error(f"❌ Resposta de criação do Pagou com campos inválidos: {e}")
            raise GatewayProtocolError(raw_body=json.dumps(data, default=str)) from e
        logger.info(f"✅ Cobrança criada: transactionId={created.transactionId} expira em {created.expirationDate}")
        return created

    async def check_status(self, transaction_id: str) -> StatusSnapshot:
        """
        Consulta o status de uma transação e aplica a tabela de mapeamento.
        """
        api_key = self._require_api_key()
        if not transaction_id or not transaction_id.strip():
            raise InvalidRequest(constants.MSG_TRANSACTION_ID_REQUIRED)

        url = f"{self.base_url}{constants.PAGOU_TRANSACTION_PATH}/{quote(transaction_id, safe='')}"
        headers = {
            "Content-Type": "application/json",
            "apiKey": api_key,
        }

        response = await self._send("GET", url, headers=headers)
        data = self._decode(response)

        if not response.is_success:
            logger.error(f"❌ Pagou API error ao consultar {transaction_id}: {data!r}")
            raise GatewayRejected(
                extract_error_message(data, constants.MSG_STATUS_FAILED),
                status_code=response.status_code,
            )
        if not isinstance(data, dict):
            raise GatewayProtocolError(raw_body=json.dumps(data, default=str))

        operation: Dict[str, Any] = data.get("operation") if isinstance(data.get("operation"), dict) else {}
        raw_status = operation.get("status")
        payment_date = operation.get("paymentSettlementDate")
        try:
            snapshot = StatusSnapshot(
                transaction_id=str(data.get("_id") or transaction_id),
                status=map_pagou_status(raw_status),
                value=operation.get("value"),
                payment_date=str(payment_date) if payment_date is not None else None,
            )
        except ValidationError as e:
            raise GatewayProtocolError(raw_body=json.dumps(data, default=str)) from e
        logger.debug(f"🔍 Status Pagou {transaction_id}: {raw_status!r} → {snapshot.status.value}")
        return snapshot
