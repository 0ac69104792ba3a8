from typing import Optional

from pydantic import BaseModel, ValidationError

from .cart import Cart
from ..core.exceptions import InvalidRequest
from ..models.schemas import Address, Payer, PaymentCreateRequest
from ..utilities.helpers import format_cep, format_document, format_phone, only_digits, to_international_phone


class BuyerForm(BaseModel):
    """
    Dados digitados no formulário de checkout, ainda com máscara.
    """
    full_name: str = ""
    document: str = ""
    email: str = ""
    phone: str = ""
    zip_code: str = ""
    street: str = ""
    number: str = ""
    complement: str = ""
    neighborhood: str = ""
    city: str = ""
    state: str = ""

    def masked(self) -> "BuyerForm":
        """Cópia com as máscaras de exibição aplicadas (CPF/CNPJ, telefone, CEP)."""
        return self.model_copy(update={
            "document": format_document(self.document),
            "phone": format_phone(self.phone),
            "zip_code": format_cep(self.zip_code),
        })

    def to_payer(self) -> Payer:
        return Payer(
            fullName=self.full_name,
            document=only_digits(self.document),
            phone=to_international_phone(self.phone),
            email=self.email,
            address=Address(
                zipCode=only_digits(self.zip_code),
                street=self.street,
                neighborhood=self.neighborhood,
                number=self.number,
                complement=self.complement or None,
                city=self.city,
                state=self.state,
                country="BR",
            ),
        )


def _first_error(exc: ValidationError) -> str:
    err = exc.errors()[0]
    location = ".".join(str(p) for p in err.get("loc", ()))
    return f"{location}: {err.get('msg')}" if location else str(err.get("msg"))


def build_payment_request(cart: Cart, form: BuyerForm, store_name: str, description: Optional[str] = None) -> PaymentCreateRequest:
    """
    Monta o corpo de ``POST /payment/create`` a partir do carrinho e do formulário.

    Raises:
        InvalidRequest: carrinho vazio ou dados do comprador inválidos
    """
    if cart.is_empty:
        raise InvalidRequest("Seu carrinho está vazio")
    try:
        return PaymentCreateRequest(
            value=cart.total,
            description=description or cart.description(store_name),
            payer=form.to_payer(),
            items=cart.to_order_items(),
        )
    except ValidationError as e:
        raise InvalidRequest(_first_error(e)) from e
