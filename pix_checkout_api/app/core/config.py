from decimal import Decimal
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger

from ..utilities import constants


class Settings(BaseSettings):
    """Configurações globais da aplicação carregadas de variáveis de ambiente."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # 🔹 Gateway PIX (Pagou). Sem a chave, as rotas respondem 500 por requisição.
    PAGOU_SECRET_KEY: Optional[str] = None
    PAGOU_API_URL: str = "https://api.pagou.ai"
    GATEWAY_TIMEOUT: float = Field(constants.GATEWAY_TIMEOUT, gt=0)

    # 🔹 Ciclo de vida da cobrança
    PIX_EXPIRATION_SECONDS: int = Field(constants.PIX_EXPIRATION_SECONDS, gt=0)
    STATUS_POLL_INTERVAL: float = Field(constants.STATUS_POLL_INTERVAL, gt=0)
    COUNTDOWN_INTERVAL: float = Field(constants.COUNTDOWN_INTERVAL, gt=0)

    # 🔹 Loja / checkout
    STORE_NAME: str = "usecalistar"
    FREE_SHIPPING_THRESHOLD: Decimal = Decimal(constants.FREE_SHIPPING_THRESHOLD)
    SHIPPING_COST: Decimal = Decimal(constants.SHIPPING_COST)

    # 🔹 Servidor
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # 🔹 Depuração
    APP_NAME: str = "PIX Checkout API"
    DEBUG: bool = False

    @property
    def payment_configured(self) -> bool:
        return bool(self.PAGOU_SECRET_KEY)


# ✅ Instância de configurações
try:
    settings = Settings()
except ValidationError as e:
    logger.error(f"❌ Erro na configuração: {e}")
    raise
