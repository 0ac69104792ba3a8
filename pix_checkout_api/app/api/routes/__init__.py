# pix_checkout_api/app/api/routes/__init__.py

from .payments import router as payments_router

__all__ = [
    "payments_router",
]
