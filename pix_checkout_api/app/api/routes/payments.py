# pix_checkout_api/app/api/routes/payments.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...core.exceptions import InvalidRequest
from ...dependencies import get_gateway_client
from ...interfaces import PaymentGatewayInterface
from ...models.schemas import PaymentCreateRequest, PaymentCreateResponse, PaymentStatusResponse
from ...utilities import constants
from ...utilities.logging_config import logger

router = APIRouter()


@router.post("/payment/create", response_model=PaymentCreateResponse)
async def create_payment(
    payment_data: PaymentCreateRequest,
    gateway: PaymentGatewayInterface = Depends(get_gateway_client),
):
    """
    Cria uma cobrança PIX no gateway e devolve os artefatos de pagamento.
    """
    logger.info(
        f"🔖 [create_payment] iniciar: valor={payment_data.value} itens={len(payment_data.items)}"
    )
    created = await gateway.create_transaction(payment_data)
    logger.info(f"✅ [create_payment] transactionId={created.transactionId} status={created.status}")
    return created


@router.get("/payment/status", response_model=PaymentStatusResponse)
async def check_payment_status(
    id: Optional[str] = Query(None, description="ID da transação no gateway"),
    gateway: PaymentGatewayInterface = Depends(get_gateway_client),
):
    """
    Consulta o status da transação e devolve o status local mapeado.
    """
    if not id or not id.strip():
        raise InvalidRequest(constants.MSG_TRANSACTION_ID_REQUIRED)

    snapshot = await gateway.check_status(id)
    return PaymentStatusResponse(
        transactionId=snapshot.transaction_id,
        status=snapshot.status,
        value=snapshot.value,
        paymentDate=snapshot.payment_date,
    )
