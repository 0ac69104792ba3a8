# pix_checkout_api/app/services/gateways/payment_payload_mapper.py

from typing import Dict, Any, Optional

from ...models.schemas import PaymentCreateRequest
from ...models.transaction import PaymentStatus
from ...utilities.constants import GATEWAY_TERMINAL_STATUSES, PIX_EXPIRATION_SECONDS


def map_to_pagou_payload(
    request: PaymentCreateRequest,
    external_id: str,
    expiration_seconds: int = PIX_EXPIRATION_SECONDS,
) -> Dict[str, Any]:
    """
    Mapeia o pedido local para o formato do gateway Pagou (PIX).
    - Documento e CEP já chegam só com dígitos; telefone em formato internacional.
    - 'externalId' é um identificador de correlação, não uma garantia de idempotência.
    - Itens e complemento não fazem parte do contrato do gateway.
    """
    payer = request.payer
    address = payer.address

    return {
        "type": "PIX",
        "payer": {
            "fullName": payer.fullName,
            "document": payer.document,
            "contact": {
                "phone": payer.phone,
                "mail": str(payer.email),
            },
            "address": {
                "zipCode": address.zipCode,
                "street": address.street,
                "neighboor": address.neighborhood,  # a API do gateway grafa assim
                "number": address.number,
                "city": address.city,
                "state": address.state,
                "country": address.country,
            },
        },
        "transaction": {
            "value": float(request.value),
            "description": request.description,
            "externalId": external_id,
            "expirationTime": expiration_seconds,
        },
    }


def map_pagou_status(raw_status: Optional[Any]) -> PaymentStatus:
    """
    Tabela fixa de status do gateway para status local.

    PAID, ERROR e EXPIRED mapeiam 1:1; qualquer outro valor (inclusive
    ausente) é WAITING_PAYMENT. Ausência de sinal nunca é falha.
    """
    if isinstance(raw_status, str) and raw_status in GATEWAY_TERMINAL_STATUSES:
        return PaymentStatus(raw_status)
    return PaymentStatus.WAITING_PAYMENT


def extract_error_message(data: Any, default: str) -> str:
    """Mensagem de erro fornecida pelo gateway, se houver."""
    if isinstance(data, dict):
        for key in ("message", "error"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return default
