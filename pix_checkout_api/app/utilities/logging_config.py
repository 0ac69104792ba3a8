from loguru import logger
import sys
import os

# Sinks próprios no lugar do handler padrão do loguru
logger.remove()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_RETENTION = os.getenv("LOG_RETENTION", "10 days")

# Console: nível configurável, colorido
logger.add(
    sys.stderr,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=LOG_LEVEL,
)

# Arquivo: sempre DEBUG (payloads do gateway e consultas de status)
os.makedirs(LOG_DIR, exist_ok=True)
logger.add(
    os.path.join(LOG_DIR, "pix_checkout.log"),
    rotation="10 MB",
    retention=LOG_RETENTION,
    compression="zip",
    level="DEBUG",
    format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
)


def mask_secret(value, visible: int = 6) -> str:
    """
    Mascara uma credencial para exibição em log, mantendo só o prefixo.
    """
    if not value:
        return "<ausente>"
    return f"{value[:visible]}..." if len(value) > visible else "***"
