from dataclasses import dataclass, field
from typing import Dict, Optional
from uuid import uuid4

from pydantic import ValidationError

from .cart import Cart
from ..interfaces import TransactionStoreInterface
from ..models.transaction import Transaction
from ..utilities.logging_config import logger


class SessionTransactionStore:
    """
    Armazenamento efêmero da transação em andamento, com escopo de uma sessão.

    Guarda o registro serializado em JSON, como o storage de sessão do
    navegador, e sobrevive à navegação checkout → pagamento, não ao fim da sessão.
    """

    KEY = "paymentData"

    def __init__(self):
        self._storage: Dict[str, str] = {}

    def save(self, transaction: Transaction) -> None:
        previous = self.load()
        if previous and previous.transaction_id != transaction.transaction_id:
            logger.info(f"♻️ Transação {previous.transaction_id} substituída por {transaction.transaction_id}")
        self._storage[self.KEY] = transaction.model_dump_json()

    def load(self) -> Optional[Transaction]:
        raw = self._storage.get(self.KEY)
        if raw is None:
            return None
        try:
            return Transaction.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"⚠️ Registro de pagamento corrompido descartado: {e}")
            self._storage.pop(self.KEY, None)
            return None

    def clear(self) -> None:
        self._storage.pop(self.KEY, None)


@dataclass
class CheckoutContext:
    """
    Contexto explícito de uma sessão de checkout: carrinho e armazenamento da
    transação, passados por referência ao fluxo de checkout e de pagamento.
    """

    cart: Cart = field(default_factory=Cart)
    store: TransactionStoreInterface = field(default_factory=SessionTransactionStore)
    session_id: str = field(default_factory=lambda: uuid4().hex)
