from .logging_config import logger, mask_secret
from .helpers import generate_external_id, only_digits, to_international_phone
from .constants import GATEWAY_TERMINAL_STATUSES

__all__ = [
    "logger",
    "mask_secret",
    "generate_external_id",
    "only_digits",
    "to_international_phone",
    "GATEWAY_TERMINAL_STATUSES",
]
