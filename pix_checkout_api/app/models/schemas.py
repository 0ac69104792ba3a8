from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, List, Optional

from pydantic import BaseModel, EmailStr, StringConstraints, field_validator

from .transaction import Money, PaymentStatus
from ..utilities.helpers import only_digits, to_international_phone

NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class Address(BaseModel):
    """
    Endereço de entrega do comprador.
    """
    zipCode: NonEmptyStr
    street: NonEmptyStr
    neighborhood: NonEmptyStr
    number: NonEmptyStr
    complement: Optional[str] = None
    city: NonEmptyStr
    state: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=2, to_upper=True)]
    country: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=2, to_upper=True)] = "BR"

    @field_validator("zipCode", mode="before")
    @classmethod
    def normalize_zip_code(cls, v):
        digits = only_digits(str(v)) if v is not None else ""
        if len(digits) != 8:
            raise ValueError("CEP deve conter 8 dígitos.")
        return digits


class Payer(BaseModel):
    """
    Dados do pagador. Documento e telefone são normalizados antes do envio.
    """
    fullName: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=100)]
    document: str
    phone: str
    email: EmailStr
    address: Address

    @field_validator("document", mode="before")
    @classmethod
    def normalize_document(cls, v):
        """Remove formatação de CPF/CNPJ e exige 11 ou 14 dígitos."""
        digits = only_digits(str(v)) if v is not None else ""
        if len(digits) not in (11, 14):
            raise ValueError("Documento deve ser um CPF (11 dígitos) ou CNPJ (14 dígitos).")
        return digits

    @field_validator("phone", mode="before")
    @classmethod
    def normalize_phone(cls, v):
        """Telefone sempre em formato internacional (+55...)."""
        phone = to_international_phone(str(v)) if v is not None else ""
        if len(only_digits(phone)) < 12:
            raise ValueError("Telefone deve conter DDD e número.")
        return phone


class OrderItem(BaseModel):
    id: str
    name: NonEmptyStr
    quantity: int
    price: Money
    size: Optional[str] = None
    color: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v)

    @field_validator("quantity")
    @classmethod
    def positive_quantity(cls, v):
        if v < 1:
            raise ValueError("A quantidade deve ser ao menos 1.")
        return v


class PaymentCreateRequest(BaseModel):
    """
    Corpo de ``POST /payment/create``.
    """
    value: Money
    description: NonEmptyStr
    payer: Payer
    items: List[OrderItem] = []

    @field_validator("value", mode="before")
    @classmethod
    def normalize_value(cls, v):
        try:
            dec = Decimal(str(v)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        except Exception as e:
            raise ValueError(f"Valor inválido para value: {v}. Erro: {e}")
        if dec <= 0:
            raise ValueError("O valor de 'value' deve ser maior que 0.")
        return dec


class PaymentCreateResponse(BaseModel):
    """
    Resposta de ``POST /payment/create``.
    """
    transactionId: str
    status: Optional[str] = None
    pixQrCode: Optional[str] = None
    pixCode: Optional[str] = None
    expirationDate: Optional[datetime] = None
    paymentLink: Optional[str] = None


class PaymentStatusResponse(BaseModel):
    """
    Resposta de ``GET /payment/status``.
    """
    transactionId: str
    status: PaymentStatus
    value: Optional[Money] = None
    paymentDate: Optional[str] = None
