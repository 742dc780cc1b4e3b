from fastapi import FastAPI
from .settings import settings
from .routers import qr_endpoints
from .utils.logging import configure_logging

configure_logging()

app = FastAPI(title=settings.APP_NAME)

app.include_router(qr_endpoints.router, tags=["QRIS"])

@app.get("/health", tags=["Ops"])
async def health():
    return {"status": "ok"}
