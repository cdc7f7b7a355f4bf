# backend/app/api/deps.py
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from backend.app.api.config import column_mode
from backend.app.belfius.csv_parser import BelfiusCsvParser
from backend.app.belfius.row_mapper import build_row_mapper
from backend.app.db import get_db
from backend.app.services.import_service import ImportOrchestrator
from backend.app.services.transaction_store import SqlTransactionStore


def get_csv_parser() -> BelfiusCsvParser:
    """
    Parser for the configured column mode.

    Header-name mapping unless BELFIUS_COLUMN_MODE=positional is set
    explicitly; the mode is never inferred from the file.
    """
    return BelfiusCsvParser(row_mapper=build_row_mapper(column_mode()))


def get_import_orchestrator(
    db: Session = Depends(get_db),
    parser: BelfiusCsvParser = Depends(get_csv_parser),
) -> ImportOrchestrator:
    return ImportOrchestrator(parser=parser, store=SqlTransactionStore(db))
