"""
Fluxo do comprador: envio do checkout e abertura da página de pagamento.

As duas operações devolvem resultados tipados em vez de navegar: quem chama
decide o que fazer com ``redirect_to``.
"""

from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import quote

from .form import BuyerForm, build_payment_request
from .poller import StatusPoller
from .session_store import CheckoutContext
from .state_machine import PaymentStateMachine
from ..core.config import Settings, settings as default_settings
from ..core.exceptions import PaymentError
from ..interfaces import PaymentGatewayInterface, StatusSourceInterface
from ..models.transaction import Transaction
from ..utilities import constants
from ..utilities.logging_config import logger


@dataclass(frozen=True)
class CheckoutSubmitted:
    transaction: Transaction
    redirect_to: str


@dataclass(frozen=True)
class CheckoutFailed:
    """Falha exibida inline; o formulário continua editável."""
    error: str


@dataclass(frozen=True)
class PaymentPageReady:
    machine: PaymentStateMachine


@dataclass(frozen=True)
class InvalidFlow:
    """Página de pagamento aberta sem transação conhecida."""
    reason: str
    redirect_to: str = constants.CHECKOUT_PATH


async def submit_checkout(
    context: CheckoutContext,
    form: BuyerForm,
    gateway: PaymentGatewayInterface,
    settings: Settings = default_settings,
) -> Union[CheckoutSubmitted, CheckoutFailed]:
    """
    Cria a cobrança para o carrinho atual e guarda a nova transação na sessão,
    substituindo qualquer tentativa anterior. O valor guardado é o total
    calculado localmente, nunca o devolvido pelo gateway.
    """
    try:
        request = build_payment_request(context.cart, form, settings.STORE_NAME)
        created = await gateway.create_transaction(request)
    except PaymentError as e:
        logger.warning(f"⚠️ Checkout {context.session_id} não concluído: {e.message}")
        return CheckoutFailed(error=e.message or "Erro ao processar pagamento")

    transaction = Transaction(
        transaction_id=created.transactionId,
        value=request.value,
        pix_qr_code=created.pixQrCode,
        pix_code=created.pixCode,
        expiration_date=created.expirationDate,
    )
    context.store.save(transaction)
    logger.info(f"🧾 Checkout {context.session_id}: transação {transaction.transaction_id} criada ({request.value})")
    return CheckoutSubmitted(
        transaction=transaction,
        redirect_to=f"{constants.PAYMENT_PAGE_PATH}?id={quote(transaction.transaction_id, safe='')}",
    )


async def open_payment_page(
    context: CheckoutContext,
    transaction_id: Optional[str],
    source: StatusSourceInterface,
) -> Union[PaymentPageReady, InvalidFlow]:
    """
    Monta a máquina de estados da página de pagamento.

    1. Registro na sessão: adotado, estado WAITING_PAYMENT.
    2. Sem registro mas com ``transaction_id``: uma consulta direta ao gateway
       e adoção do status mapeado (caminho degradado).
    3. Nenhum dos dois: ``InvalidFlow`` com redirecionamento ao checkout.
    """
    machine = PaymentStateMachine(store=context.store, on_paid=context.cart.clear)

    stored = context.store.load()
    if stored is not None:
        if transaction_id and stored.transaction_id != transaction_id:
            logger.warning(
                f"⚠️ Transação da URL ({transaction_id}) difere da sessão ({stored.transaction_id}); usando a da sessão"
            )
        machine.adopt(stored)
        return PaymentPageReady(machine=machine)

    if not transaction_id:
        logger.info(f"↩️ Sessão {context.session_id} sem transação: redirecionando ao checkout")
        return InvalidFlow(reason="Nenhuma transação em andamento")

    try:
        snapshot = await source.check_status(transaction_id)
    except PaymentError as e:
        logger.warning(f"⚠️ Consulta inicial de {transaction_id} falhou, seguindo em espera: {e.message}")
        machine.adopt(Transaction(transaction_id=transaction_id))
    else:
        machine.adopt_snapshot(snapshot)
    return PaymentPageReady(machine=machine)


def build_poller(
    machine: PaymentStateMachine,
    source: StatusSourceInterface,
    settings: Settings = default_settings,
    **kwargs,
) -> StatusPoller:
    """Poller com os intervalos configurados (consulta 5 s, contador 1 s)."""
    return StatusPoller(
        machine,
        source,
        poll_interval=settings.STATUS_POLL_INTERVAL,
        tick_interval=settings.COUNTDOWN_INTERVAL,
        **kwargs,
    )
