from .cart import Cart, CartItem
from .form import BuyerForm, build_payment_request
from .session_store import CheckoutContext, SessionTransactionStore
from .state_machine import PaymentStateMachine
from .poller import StatusPoller
from .flow import (
    CheckoutSubmitted,
    CheckoutFailed,
    PaymentPageReady,
    InvalidFlow,
    submit_checkout,
    open_payment_page,
    build_poller,
)
from .view import PaymentView, render_payment_view

__all__ = [
    "Cart",
    "CartItem",
    "BuyerForm",
    "build_payment_request",
    "CheckoutContext",
    "SessionTransactionStore",
    "PaymentStateMachine",
    "StatusPoller",
    "CheckoutSubmitted",
    "CheckoutFailed",
    "PaymentPageReady",
    "InvalidFlow",
    "submit_checkout",
    "open_payment_page",
    "build_poller",
    "PaymentView",
    "render_payment_view",
]
