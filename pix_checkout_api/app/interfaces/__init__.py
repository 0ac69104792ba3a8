# pix_checkout_api/app/interfaces/__init__.py

from typing import Protocol, Optional

from ..models.schemas import PaymentCreateRequest, PaymentCreateResponse
from ..models.transaction import StatusSnapshot, Transaction


# ========== GATEWAY ==========

class StatusSourceInterface(Protocol):
    """Qualquer origem capaz de consultar o status de uma transação."""

    async def check_status(self, transaction_id: str) -> StatusSnapshot: ...


class PaymentGatewayInterface(StatusSourceInterface, Protocol):
    """Cria cobranças PIX e consulta seu status (gateway direto ou API local)."""

    async def create_transaction(self, request: PaymentCreateRequest) -> PaymentCreateResponse: ...


# ========== ARMAZENAMENTO DE SESSÃO ==========

class TransactionStoreInterface(Protocol):
    """Guarda a única transação em andamento de uma sessão de checkout."""

    def save(self, transaction: Transaction) -> None: ...

    def load(self) -> Optional[Transaction]: ...

    def clear(self) -> None: ...
