# pix_checkout_api/app/services/__init__.py

from .qr_code import build_qr_code_data_uri
from .checkout_api_client import CheckoutApiClient

__all__ = [
    "build_qr_code_data_uri",
    "CheckoutApiClient",
]
