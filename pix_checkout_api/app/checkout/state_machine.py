from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from ..interfaces import TransactionStoreInterface
from ..models.transaction import PaymentStatus, StatusSnapshot, Transaction
from ..utilities.logging_config import logger

TransitionListener = Callable[[PaymentStatus, PaymentStatus], None]


class PaymentStateMachine:
    """
    Ciclo de vida de uma cobrança PIX, derivado só de consultas de status e
    do relógio local.

    LOADING → WAITING_PAYMENT → PAID | ERROR | EXPIRED. Estados finais não têm
    saída: resultados atrasados de consulta ou ticks do contador são descartados.
    Ao chegar em PAID o armazenamento de sessão é limpo (uma única vez).
    """

    def __init__(
        self,
        store: Optional[TransactionStoreInterface] = None,
        on_paid: Optional[Callable[[], None]] = None,
    ):
        self._store = store
        self._on_paid = on_paid
        self._state = PaymentStatus.LOADING
        self._transaction: Optional[Transaction] = None
        self._listeners: List[TransitionListener] = []
        self.history: List[Tuple[PaymentStatus, PaymentStatus]] = []

    @property
    def state(self) -> PaymentStatus:
        return self._state

    @property
    def transaction(self) -> Optional[Transaction]:
        return self._transaction

    @property
    def is_terminal(self) -> bool:
        return self._state.is_terminal

    def add_listener(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    # ========== MONTAGEM ==========

    def adopt(self, transaction: Transaction) -> PaymentStatus:
        """
        Adota a transação guardada na sessão. Só é válido a partir de LOADING.
        """
        if self._state is not PaymentStatus.LOADING:
            raise RuntimeError(f"Transação já adotada (estado atual: {self._state.value})")
        self._transaction = transaction
        target = transaction.status if transaction.status.is_terminal else PaymentStatus.WAITING_PAYMENT
        self._transition(target)
        return self._state

    def adopt_snapshot(self, snapshot: StatusSnapshot) -> PaymentStatus:
        """
        Caminho degradado: sem registro na sessão, adota o resultado de uma
        consulta direta ao gateway. Não há artefatos PIX nem data de expiração.
        """
        return self.adopt(
            Transaction(
                transaction_id=snapshot.transaction_id,
                value=snapshot.value,
                status=snapshot.status,
            )
        )

    # ========== EVENTOS ==========

    def apply_status(self, status: PaymentStatus) -> bool:
        """
        Aplica o status mapeado de uma consulta. Retorna True se houve transição.
        """
        if self._state is not PaymentStatus.WAITING_PAYMENT:
            logger.debug(f"🗑️ Status {status.value} descartado no estado {self._state.value}")
            return False
        if not status.is_terminal:
            return False
        self._transition(status)
        return True

    def check_expiration(self, now: datetime) -> bool:
        """
        Compara o relógio local com a expiração; expira mesmo sem resposta do gateway.
        """
        if self._state is not PaymentStatus.WAITING_PAYMENT or self._transaction is None:
            return False
        if not self._transaction.is_expired(now):
            return False
        logger.info(f"⌛ Transação {self._transaction.transaction_id} expirou pelo relógio local")
        self._transition(PaymentStatus.EXPIRED)
        return True

    def time_left(self, now: datetime) -> Optional[timedelta]:
        if self._transaction is None or self._transaction.expiration_date is None:
            return None
        return max(self._transaction.expiration_date - now, timedelta(0))

    # ========== INTERNO ==========

    def _transition(self, target: PaymentStatus) -> None:
        previous = self._state
        self._state = target
        if self._transaction is not None and self._transaction.status is not target:
            self._transaction = self._transaction.with_status(target)
        self.history.append((previous, target))

        transaction_id = self._transaction.transaction_id if self._transaction else "?"
        logger.info(f"🔄 Pagamento {transaction_id}: {previous.value} → {target.value}")

        if target is PaymentStatus.PAID:
            if self._store is not None:
                self._store.clear()
            if self._on_paid is not None:
                self._on_paid()

        for listener in list(self._listeners):
            listener(previous, target)
