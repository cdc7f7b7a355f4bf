from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from backend.app.belfius.row_mapper import BelfiusTransaction
from backend.app.models import ImportLog, Transaction

logger = logging.getLogger(__name__)

InsertStatus = Literal["inserted", "duplicate", "error"]


class DuplicateImportError(Exception):
    """An import log with the same file hash already exists."""

    def __init__(self, file_hash: str):
        super().__init__(f"import log already exists for file_hash={file_hash}")
        self.file_hash = file_hash


@dataclass(frozen=True)
class InsertResult:
    status: InsertStatus
    error: Optional[str] = None


def duplicate_key(txn: BelfiusTransaction) -> str:
    """
    Digest of (account, booking date, amount, counterpart account, reference).
    NULLs render as "" so they compare equal, and -0.00 is 0.00.
    """
    parts = [
        txn.account_number,
        txn.booking_date,
        f"{round(txn.amount, 2) + 0.0:.2f}",
        txn.counterpart_account,
        txn.reference_number,
    ]
    return hashlib.sha256("|".join(part or "" for part in parts).encode("utf-8")).hexdigest()


def _to_date(value: Optional[str], field_name: str) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid {field_name}: {value} ({e})") from e


class SqlTransactionStore:
    """
    SQLAlchemy-backed storage for the import pipeline.

    insert_transaction runs each row in its own savepoint so a failed row
    never poisons the surrounding transaction. Nothing is committed until
    commit() is called, except the import log (see create_import_log).
    """

    def __init__(self, db: Session):
        self.db = db

    def insert_transaction(self, txn: BelfiusTransaction, *, file_hash: Optional[str] = None) -> InsertResult:
        key = duplicate_key(txn)
        try:
            row = Transaction(
                account_number=txn.account_number,
                statement_number=txn.statement_number,
                transaction_number=txn.transaction_number,
                booking_date=_to_date(txn.booking_date, "booking date"),
                value_date=_to_date(txn.value_date, "value date"),
                counterpart_account=txn.counterpart_account,
                counterpart_name=txn.counterpart_name,
                counterpart_address=txn.counterpart_address,
                counterpart_postal_code=txn.counterpart_postal_code,
                counterpart_city=txn.counterpart_city,
                transaction_type=txn.transaction_type,
                amount=txn.amount,
                currency=txn.currency,
                bic=txn.bic,
                country_code=txn.country_code,
                description=txn.description,
                reference_number=txn.reference_number,
                duplicate_key=key,
                file_hash=file_hash,
            )
        except ValueError as e:
            return InsertResult("error", str(e))

        try:
            with self.db.begin_nested():
                if self._duplicate_exists(key):
                    return InsertResult("duplicate")
                self.db.add(row)
                self.db.flush()
        except IntegrityError as e:
            # Lost a race with a concurrent import of the same row.
            try:
                duplicate = self._duplicate_exists(key)
            except SQLAlchemyError:
                logger.warning("[store] duplicate re-check failed account=%s", txn.account_number)
                duplicate = False
            if duplicate:
                return InsertResult("duplicate")
            return InsertResult("error", str(e.orig))
        except SQLAlchemyError as e:
            logger.warning("[store] insert failed account=%s: %s", txn.account_number, e)
            return InsertResult("error", str(getattr(e, "orig", None) or e))
        return InsertResult("inserted")

    def find_import_log_by_hash(self, file_hash: str) -> Optional[ImportLog]:
        return self.db.execute(
            select(ImportLog).where(ImportLog.file_hash == file_hash)
        ).scalar_one_or_none()

    def create_import_log(self, *, filename: str, file_hash: str) -> ImportLog:
        """
        Insert and commit a `processing` log.

        Committed immediately so a concurrent import of the same bytes hits the
        unique constraint on file_hash. Raises DuplicateImportError when it does.
        """
        log = ImportLog(filename=filename, file_hash=file_hash, status="processing")
        self.db.add(log)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateImportError(file_hash) from e
        return log

    def update_import_log(self, log_id: int, **fields: Any) -> ImportLog:
        log = self.db.get(ImportLog, log_id)
        if log is None:
            raise LookupError(f"import log {log_id} not found")
        for name, value in fields.items():
            setattr(log, name, value)
        self.db.flush()
        return log

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def _duplicate_exists(self, key: str) -> bool:
        return (
            self.db.execute(
                select(Transaction.id).where(Transaction.duplicate_key == key)
            ).scalar_one_or_none()
            is not None
        )
