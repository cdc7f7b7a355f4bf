import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.api.config import app_version
from backend.app.api.routes.system import router as system_router
from backend.app.api.routes.transactions import router as transactions_router
from backend.app.api.routes.upload import router as upload_router


logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS")
    if raw is None:
        origins = ["http://localhost:3000", "http://127.0.0.1:3000"]
    else:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        raise RuntimeError("CORS_ALLOW_ORIGINS must not be empty.")
    if "*" in origins:
        logger.warning("CORS allowlist is open to every origin")
    return origins


app = FastAPI(title="Belfius Statement Importer", version=app_version())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system_router)
app.include_router(upload_router)
app.include_router(transactions_router)
