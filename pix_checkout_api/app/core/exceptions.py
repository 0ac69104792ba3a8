"""
Taxonomia de erros do checkout PIX.

Cada erro carrega o status HTTP e a mensagem exposta ao chamador; os handlers
em ``error_handlers`` renderizam todos como ``{"error": mensagem}``.
"""

from typing import Optional

from ..utilities import constants


class PaymentError(Exception):
    """Erro base do fluxo de pagamento."""

    status_code = 500
    default_message = constants.MSG_NETWORK_ERROR

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ConfigurationError(PaymentError):
    """Credencial do gateway ausente: fatal para a requisição, não para o processo."""

    status_code = 500
    default_message = constants.MSG_NOT_CONFIGURED


ServiceUnavailable = ConfigurationError


class InvalidRequest(PaymentError):
    """Campo obrigatório ausente ou malformado."""

    status_code = 400
    default_message = "Invalid request"


class GatewayRejected(PaymentError):
    """O gateway respondeu com status de erro; status e mensagem são propagados."""

    status_code = 502
    default_message = "Payment gateway rejected the request"


class GatewayProtocolError(PaymentError):
    """Resposta do gateway impossível de interpretar (não-JSON ou formato inesperado)."""

    status_code = 500
    default_message = "Invalid response from payment service"

    def __init__(self, message: Optional[str] = None, raw_body: str = ""):
        self.raw_body = raw_body
        super().__init__(message)


class NetworkError(PaymentError):
    """Falha transitória de comunicação com o gateway."""

    status_code = 500
    default_message = constants.MSG_NETWORK_ERROR
