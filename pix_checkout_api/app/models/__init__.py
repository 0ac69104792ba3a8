from .transaction import (
    PaymentStatus,
    TERMINAL_STATUSES,
    Transaction,
    StatusSnapshot,
)

from .schemas import (
    Address,
    Payer,
    OrderItem,
    PaymentCreateRequest,
    PaymentCreateResponse,
    PaymentStatusResponse,
)

__all__ = [
    "PaymentStatus",
    "TERMINAL_STATUSES",
    "Transaction",
    "StatusSnapshot",
    "Address",
    "Payer",
    "OrderItem",
    "PaymentCreateRequest",
    "PaymentCreateResponse",
    "PaymentStatusResponse",
]
