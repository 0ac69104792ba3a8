# pix_checkout_api/app/dependencies.py

from typing import Optional

import httpx
from fastapi import Depends

from .core.config import Settings, settings as _settings
from .core.exceptions import ConfigurationError
from .services.gateways.pagou_client import PagouClient
from .utilities.logging_config import logger


def get_settings() -> Settings:
    """Configurações da aplicação (substituível em testes via dependency_overrides)."""
    return _settings


def get_gateway_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transporte HTTP do gateway; ``None`` usa a rede real."""
    return None


def get_gateway_client(
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_gateway_transport),
) -> PagouClient:
    """
    Monta o cliente do gateway para a requisição corrente.
    Sem credencial, a requisição falha aqui, antes de qualquer chamada externa.
    """
    if not settings.payment_configured:
        logger.error("❌ PAGOU_SECRET_KEY is not configured")
        raise ConfigurationError()
    return PagouClient(
        api_key=settings.PAGOU_SECRET_KEY,
        base_url=settings.PAGOU_API_URL,
        timeout=settings.GATEWAY_TIMEOUT,
        expiration_seconds=settings.PIX_EXPIRATION_SECONDS,
        transport=transport,
    )
