import uvicorn

def start():
    """Sobe a API com Uvicorn em HOST:PORT (variáveis de ambiente)."""
    from pix_checkout_api.app.main import app  # import tardio: main importa este pacote
    from pix_checkout_api.app.core.config import settings
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, reload=False)

if __name__ == "__main__":
    start()
