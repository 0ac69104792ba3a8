# pix_checkout_api/app/main.py

from dotenv import load_dotenv; load_dotenv()

from fastapi import FastAPI, Response
from pix_checkout_api.app.api.routes import payments_router
from pix_checkout_api.app.core.config import settings
from pix_checkout_api.app.core.error_handlers import add_error_handlers
from pix_checkout_api.app.utilities.logging_config import logger, mask_secret

API_VERSION = "0.1.0"


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=API_VERSION,
        description="Checkout PIX: cria cobranças no gateway Pagou e expõe a consulta de status para acompanhamento até a confirmação",
        debug=settings.DEBUG,
    )

    # ========== ROTAS ==========
    app.include_router(payments_router, tags=["Pagamentos"])

    # ========== HANDLERS DE ERRO ==========
    add_error_handlers(app)

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"✅ API `{app.title}` versão `{app.version}` inicializada!")
        logger.info(f"🔧 Debug: {'Ativado' if app.debug else 'Desativado'}")
        if settings.payment_configured:
            logger.info(f"🔑 PAGOU_SECRET_KEY carregada: {mask_secret(settings.PAGOU_SECRET_KEY)}")
        else:
            logger.warning("⚠️ PAGOU_SECRET_KEY ausente: /payment/create e /payment/status responderão 500")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("🛑 Aplicação sendo encerrada...")

    @app.get("/", tags=["Health Check"])
    @app.head("/", tags=["Health Check"])
    async def health_check(response: Response):
        response.headers["Cache-Control"] = "no-cache"
        return {
            "status": "OK",
            "message": f"{app.title} operacional",
            "version": API_VERSION,
            "payment_configured": settings.payment_configured,
            "endpoints": {
                "create": "POST /payment/create",
                "status": "GET /payment/status?id=<transactionId>",
            },
        }

    return app


app = create_app()
__all__ = ["app", "create_app"]
