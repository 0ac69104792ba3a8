from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from .state_machine import PaymentStateMachine
from ..models.transaction import PaymentStatus
from ..utilities import constants
from ..utilities.helpers import format_brl, format_countdown, utcnow

PIX_INSTRUCTIONS = (
    "Abra o app do seu banco ou carteira digital",
    "Escolha pagar via PIX com QR Code ou Copia e Cola",
    "Escaneie o código ou cole o código copiado",
    "Confirme o pagamento e aguarde a confirmação",
)


@dataclass(frozen=True)
class ViewAction:
    label: str
    href: Optional[str] = None
    command: Optional[str] = None


@dataclass(frozen=True)
class PaymentView:
    """O que a página de pagamento mostra em cada estado."""
    state: PaymentStatus
    title: str
    message: str
    countdown: Optional[str] = None
    amount: Optional[str] = None
    pix_code: Optional[str] = None
    pix_qr_code: Optional[str] = None
    order_code: Optional[str] = None
    instructions: Tuple[str, ...] = ()
    actions: Tuple[ViewAction, ...] = ()


BACK_TO_STORE = ViewAction("Voltar à Loja", href=constants.HOME_PATH)
TRY_AGAIN = ViewAction("Tentar Novamente", href=constants.CHECKOUT_PATH)
CHECK_NOW = ViewAction("Verificar pagamento", command="check_now")


def render_payment_view(machine: PaymentStateMachine, now: Optional[datetime] = None) -> PaymentView:
    state = machine.state
    transaction = machine.transaction

    if state is PaymentStatus.LOADING:
        return PaymentView(state, "Carregando pagamento...", "")

    if state is PaymentStatus.PAID:
        return PaymentView(
            state,
            "Pagamento Confirmado!",
            "Seu pedido foi recebido com sucesso. Você receberá um e-mail com os "
            "detalhes da compra e informações de envio.",
            order_code=transaction.transaction_id[:8].upper() if transaction else None,
            actions=(BACK_TO_STORE,),
        )

    if state is PaymentStatus.EXPIRED:
        return PaymentView(
            state,
            "Pagamento Expirado",
            "O tempo para realizar o pagamento expirou. Por favor, tente novamente.",
            countdown="Expirado",
            actions=(BACK_TO_STORE, TRY_AGAIN),
        )

    if state is PaymentStatus.ERROR:
        return PaymentView(
            state,
            "Erro no Pagamento",
            "Ocorreu um erro ao processar seu pagamento. Por favor, tente novamente.",
            actions=(BACK_TO_STORE, TRY_AGAIN),
        )

    remaining = machine.time_left(now or utcnow())
    return PaymentView(
        state,
        "Pagamento via PIX",
        "Escaneie o QR Code ou copie o código para pagar",
        countdown=format_countdown(remaining) if remaining is not None else None,
        amount=format_brl(transaction.value) if transaction and transaction.value is not None else None,
        pix_code=transaction.pix_code if transaction else None,
        pix_qr_code=transaction.pix_qr_code if transaction else None,
        instructions=PIX_INSTRUCTIONS,
        actions=(CHECK_NOW,),
    )
