from __future__ import annotations

import logging
from datetime import datetime
from pathlib import PurePath
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.api.config import expose_error_details, max_upload_bytes, upload_dir
from backend.app.api.deps import get_import_orchestrator
from backend.app.db import get_db
from backend.app.services import transaction_service
from backend.app.services.import_service import ImportOrchestrator, UploadTooLargeError, staged_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])

CSV_CONTENT_TYPES = {"text/csv", "application/csv"}


class ImportSummaryOut(BaseModel):
    totalRecords: int
    imported: int
    skipped: int
    errors: int


class RowErrorOut(BaseModel):
    row: int
    error: str


class UploadResultOut(BaseModel):
    success: bool
    summary: ImportSummaryOut
    errors: List[RowErrorOut]


class ImportLogOut(BaseModel):
    id: int
    filename: str
    total_records: int
    imported_records: int
    skipped_records: int
    error_records: int
    status: str
    error_message: Optional[str] = None
    imported_at: datetime
    completed_at: Optional[datetime] = None


def _is_csv(upload: UploadFile) -> bool:
    if upload.content_type in CSV_CONTENT_TYPES:
        return True
    return (upload.filename or "").lower().endswith(".csv")


def _error(status_code: int, body: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@router.post("", response_model=UploadResultOut)
def upload_statement(
    csv_file: Optional[UploadFile] = File(None, alias="csvFile"),
    orchestrator: ImportOrchestrator = Depends(get_import_orchestrator),
):
    """
    Import one Belfius CSV export.

    200 with counts on completion (row errors included), 409 when the same
    bytes were imported before, 400 when the file cannot be parsed.
    """
    if csv_file is None:
        return _error(400, {"error": "No file uploaded"})
    if not _is_csv(csv_file):
        return _error(400, {"error": "Only CSV files are allowed!"})

    filename = PurePath(csv_file.filename or "upload.csv").name
    try:
        with staged_upload(csv_file.file, upload_dir=upload_dir(), max_bytes=max_upload_bytes()) as path:
            outcome = orchestrator.import_file(path, filename)
    except UploadTooLargeError as e:
        return _error(413, {"error": str(e)})
    except Exception as e:
        logger.exception("[upload] processing failed file=%s", filename)
        body: Dict[str, Any] = {"error": "Failed to process file"}
        if expose_error_details():
            body["details"] = str(e)
        return _error(500, body)

    if outcome.status == "duplicate_file":
        return _error(409, {"error": outcome.error, "importDate": outcome.original_imported_at})
    if outcome.status == "parse_failed":
        return _error(400, {"error": outcome.error})

    return UploadResultOut(
        success=True,
        summary=ImportSummaryOut(**outcome.summary()),
        errors=[RowErrorOut(**item) for item in outcome.errors],
    )


@router.get("/history", response_model=List[ImportLogOut])
def upload_history(db: Session = Depends(get_db)):
    return [ImportLogOut(**item) for item in transaction_service.import_history(db)]
