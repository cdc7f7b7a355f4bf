from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from backend.app.api.config import app_version

router = APIRouter(prefix="/api", tags=["system"])


@router.get("/health")
def health():
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": app_version(),
    }
