from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, PlainSerializer, field_validator

from ..utilities.helpers import to_decimal


class PaymentStatus(str, Enum):
    """Estados do ciclo de vida de uma cobrança PIX no checkout."""

    LOADING = "LOADING"
    WAITING_PAYMENT = "WAITING_PAYMENT"
    PAID = "PAID"
    ERROR = "ERROR"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({PaymentStatus.PAID, PaymentStatus.ERROR, PaymentStatus.EXPIRED})

# Valores monetários saem como número no JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Transaction(BaseModel):
    """
    Uma tentativa de pagamento.

    Imutável: os artefatos PIX e o valor são fixados na criação. A mudança de
    status gera uma cópia (``with_status``), nunca altera a instância.
    """

    model_config = ConfigDict(frozen=True)

    transaction_id: str
    value: Optional[Money] = None
    pix_qr_code: Optional[str] = None
    pix_code: Optional[str] = None
    expiration_date: Optional[datetime] = None
    status: PaymentStatus = PaymentStatus.WAITING_PAYMENT

    @field_validator("value")
    @classmethod
    def quantize_value(cls, v):
        """Centavos fixos: o JSON da sessão guarda o valor como número."""
        return to_decimal(v) if v is not None else None

    def with_status(self, status: PaymentStatus) -> "Transaction":
        return self.model_copy(update={"status": status})

    def is_expired(self, now: datetime) -> bool:
        return self.expiration_date is not None and now >= self.expiration_date


class StatusSnapshot(BaseModel):
    """Resultado normalizado de uma consulta de status no gateway."""

    model_config = ConfigDict(frozen=True)

    transaction_id: str
    status: PaymentStatus
    value: Optional[Money] = None
    payment_date: Optional[str] = None
