from fastapi import FastAPI
from backend.api.health_routes import router as health_router
from backend.api.qr_routes import router as qr_router
from backend.api.scan_routes import router as scan_router
from backend.core.logging import setup_logging

setup_logging()

app = FastAPI(
    title="QR Code Generator & Scan Log",
    version="1.0.0",
)

app.include_router(health_router)
app.include_router(qr_router, prefix="/api")
app.include_router(scan_router, prefix="/api")
