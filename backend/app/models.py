from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from backend.app.db import Base


# -------------------------
# Helpers
# -------------------------

IMPORT_STATUSES = ("pending", "processing", "completed", "failed")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# -------------------------
# Core models
# -------------------------

class Transaction(Base):
    """
    One persisted statement line.

    duplicate_key is derived from (account, booking date, amount, counterpart
    account, reference) and carries the uniqueness guarantee, so rows with
    NULL counterpart/reference still collide.
    """
    __tablename__ = "transactions"
    __table_args__ = (
        UniqueConstraint("duplicate_key", name="uq_transactions_duplicate_key"),
        Index("ix_transactions_account_date", "account_number", "booking_date"),
        Index("ix_transactions_counterpart", "counterpart_account"),
        Index("ix_transactions_amount", "amount"),
        Index("ix_transactions_booking_date", "booking_date"),
        Index("ix_transactions_file_hash", "file_hash"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    account_number: Mapped[str] = mapped_column(String(50), nullable=False)
    statement_number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    transaction_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    booking_date: Mapped[date] = mapped_column(Date, nullable=False)
    value_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    counterpart_account: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    counterpart_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    counterpart_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    counterpart_postal_code: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    counterpart_city: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    transaction_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")

    bic: Mapped[Optional[str]] = mapped_column(String(11), nullable=True)
    country_code: Mapped[Optional[str]] = mapped_column(String(2), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    duplicate_key: Mapped[str] = mapped_column(String(64), nullable=False)
    file_hash: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    imported_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class ImportLog(Base):
    """
    One row per uploaded file. file_hash is unique: it closes the window
    between "was this file imported?" and "record that it is being imported".
    """
    __tablename__ = "import_logs"
    __table_args__ = (
        Index("ix_import_logs_status", "status"),
        Index("ix_import_logs_imported_at", "imported_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)
    file_hash: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    total_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    imported_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    skipped_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_records: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    imported_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
