from __future__ import annotations

import hashlib
import json
import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Literal, Optional

from backend.app.belfius.csv_parser import BelfiusCsvParser, RowFailure
from backend.app.models import utcnow
from backend.app.services.transaction_store import DuplicateImportError, SqlTransactionStore

logger = logging.getLogger(__name__)

LOGGED_ERROR_LIMIT = 10
RETURNED_ERROR_LIMIT = 5
COPY_CHUNK_SIZE = 64 * 1024

ImportStatus = Literal["completed", "duplicate_file", "parse_failed"]


class UploadTooLargeError(Exception):
    def __init__(self, max_bytes: int):
        super().__init__(f"file exceeds the {max_bytes} byte upload limit")
        self.max_bytes = max_bytes


@dataclass
class ImportOutcome:
    status: ImportStatus
    filename: str
    file_hash: str
    import_log_id: Optional[int] = None
    total_records: int = 0
    imported: int = 0
    skipped: int = 0
    errored: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None
    original_imported_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.status == "completed"

    def summary(self) -> Dict[str, int]:
        return {
            "totalRecords": self.total_records,
            "imported": self.imported,
            "skipped": self.skipped,
            "errors": self.errored,
        }


def fingerprint(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


class ImportOrchestrator:
    """
    Runs one file through parse -> persist -> import log.

    A file is imported at most once (keyed by its SHA-256). Row-level
    problems are folded into the counts; only a parse failure marks the
    import log as failed.
    """

    def __init__(self, parser: BelfiusCsvParser, store: SqlTransactionStore):
        self.parser = parser
        self.store = store

    def import_file(self, path: Path, filename: str) -> ImportOutcome:
        return self.import_bytes(Path(path).read_bytes(), filename)

    def import_bytes(self, content: bytes, filename: str) -> ImportOutcome:
        file_hash = fingerprint(content)
        logger.info("[import] processing file=%s hash=%s", filename, file_hash)

        existing = self.store.find_import_log_by_hash(file_hash)
        if existing is not None:
            return self._duplicate_outcome(filename, file_hash, existing.imported_at)

        try:
            log = self.store.create_import_log(filename=filename, file_hash=file_hash)
        except DuplicateImportError:
            existing = self.store.find_import_log_by_hash(file_hash)
            return self._duplicate_outcome(
                filename,
                file_hash,
                existing.imported_at if existing is not None else None,
            )
        log_id = log.id

        try:
            return self._process(content, filename, file_hash, log_id)
        except Exception as e:
            logger.exception("[import] unexpected failure file=%s log_id=%s", filename, log_id)
            self.store.rollback()
            self.store.update_import_log(log_id, status="failed", error_message=str(e))
            self.store.commit()
            raise

    def _process(self, content: bytes, filename: str, file_hash: str, log_id: int) -> ImportOutcome:
        parsed = self.parser.parse(content)
        if not parsed.ok:
            logger.warning("[import] parse failed file=%s: %s", filename, parsed.error)
            self.store.update_import_log(log_id, status="failed", error_message=parsed.error)
            self.store.commit()
            return ImportOutcome(
                status="parse_failed",
                filename=filename,
                file_hash=file_hash,
                import_log_id=log_id,
                error=parsed.error,
            )

        imported = 0
        skipped = 0
        failures: List[RowFailure] = list(parsed.row_errors)

        for parsed_row in parsed.rows:
            result = self.store.insert_transaction(parsed_row.transaction, file_hash=file_hash)
            if result.status == "inserted":
                imported += 1
            elif result.status == "duplicate":
                skipped += 1
            else:
                logger.warning("[import] error importing row %s: %s", parsed_row.row, result.error)
                failures.append(RowFailure(row=parsed_row.row, error=result.error or "storage error"))

        failures.sort(key=lambda failure: failure.row)
        total = len(parsed.rows) + len(parsed.row_errors)
        logged_errors = [failure.as_dict() for failure in failures[:LOGGED_ERROR_LIMIT]]

        self.store.update_import_log(
            log_id,
            total_records=total,
            imported_records=imported,
            skipped_records=skipped,
            error_records=len(failures),
            status="completed",
            completed_at=utcnow(),
            error_message=json.dumps(logged_errors) if logged_errors else None,
        )
        self.store.commit()

        logger.info(
            "[import] completed file=%s imported=%s skipped=%s errors=%s",
            filename,
            imported,
            skipped,
            len(failures),
        )
        return ImportOutcome(
            status="completed",
            filename=filename,
            file_hash=file_hash,
            import_log_id=log_id,
            total_records=total,
            imported=imported,
            skipped=skipped,
            errored=len(failures),
            errors=[failure.as_dict() for failure in failures[:RETURNED_ERROR_LIMIT]],
        )

    @staticmethod
    def _duplicate_outcome(filename: str, file_hash: str, imported_at: Optional[datetime]) -> ImportOutcome:
        logger.info("[import] duplicate file=%s hash=%s first_imported=%s", filename, file_hash, imported_at)
        return ImportOutcome(
            status="duplicate_file",
            filename=filename,
            file_hash=file_hash,
            error="File already processed",
            original_imported_at=imported_at,
        )


@contextmanager
def staged_upload(
    source: BinaryIO,
    *,
    upload_dir: Optional[Path] = None,
    suffix: str = ".csv",
    max_bytes: Optional[int] = None,
) -> Iterator[Path]:
    """
    Copy an uploaded stream to a temporary file and yield its path.

    The file is removed when the block exits, whatever the outcome.
    Raises UploadTooLargeError once more than max_bytes have been read.
    """
    if upload_dir is not None:
        upload_dir.mkdir(parents=True, exist_ok=True)
    fd, name = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=upload_dir)
    path = Path(name)
    try:
        with os.fdopen(fd, "wb") as tmp:
            if max_bytes is None:
                shutil.copyfileobj(source, tmp)
            else:
                written = 0
                while True:
                    chunk = source.read(COPY_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > max_bytes:
                        raise UploadTooLargeError(max_bytes)
                    tmp.write(chunk)
        yield path
    finally:
        path.unlink(missing_ok=True)
