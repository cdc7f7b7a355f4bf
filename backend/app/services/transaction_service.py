from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import case, delete, func, select
from sqlalchemy.orm import Session

from backend.app.models import ImportLog, Transaction

HISTORY_LIMIT = 50

_TRANSACTION_FIELDS = (
    "id",
    "account_number",
    "statement_number",
    "transaction_number",
    "booking_date",
    "value_date",
    "counterpart_account",
    "counterpart_name",
    "counterpart_address",
    "counterpart_postal_code",
    "counterpart_city",
    "transaction_type",
    "amount",
    "currency",
    "bic",
    "country_code",
    "description",
    "reference_number",
    "file_hash",
    "imported_at",
    "updated_at",
)


def _require_transaction(db: Session, transaction_id: int) -> Transaction:
    txn = db.get(Transaction, transaction_id)
    if not txn:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return txn


def _transaction_dict(txn: Transaction) -> Dict[str, Any]:
    return {name: getattr(txn, name) for name in _TRANSACTION_FIELDS}


def _filtered(query, account: Optional[str], start_date: Optional[date], end_date: Optional[date]):
    if account:
        query = query.where(Transaction.account_number == account)
    if start_date:
        query = query.where(Transaction.booking_date >= start_date)
    if end_date:
        query = query.where(Transaction.booking_date <= end_date)
    return query


def list_transactions(
    db: Session,
    *,
    page: int = 1,
    limit: int = 50,
    account: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Dict[str, Any]:
    total = db.execute(
        _filtered(select(func.count(Transaction.id)), account, start_date, end_date)
    ).scalar_one()

    rows = (
        db.execute(
            _filtered(select(Transaction), account, start_date, end_date)
            .order_by(Transaction.booking_date.desc(), Transaction.id.desc())
            .limit(limit)
            .offset((page - 1) * limit)
        )
        .scalars()
        .all()
    )

    return {
        "transactions": [_transaction_dict(row) for row in rows],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": math.ceil(total / limit) if limit else 0,
        },
    }


def transaction_stats(db: Session, account: Optional[str] = None) -> Dict[str, Any]:
    income = case((Transaction.amount > 0, Transaction.amount), else_=0)
    expense = case((Transaction.amount < 0, -Transaction.amount), else_=0)

    query = select(
        func.count(Transaction.id),
        func.count(func.distinct(Transaction.account_number)),
        func.coalesce(func.sum(income), 0),
        func.coalesce(func.sum(expense), 0),
        func.min(Transaction.booking_date),
        func.max(Transaction.booking_date),
        func.avg(case((Transaction.amount < 0, -Transaction.amount), else_=None)),
        func.avg(case((Transaction.amount > 0, Transaction.amount), else_=None)),
    )
    if account:
        query = query.where(Transaction.account_number == account)

    (
        total,
        accounts,
        total_income,
        total_expenses,
        earliest,
        latest,
        avg_expense,
        avg_income,
    ) = db.execute(query).one()

    return {
        "total_transactions": total,
        "accounts_count": accounts,
        "total_income": round(float(total_income), 2),
        "total_expenses": round(float(total_expenses), 2),
        "earliest_transaction": earliest,
        "latest_transaction": latest,
        "avg_expense": round(float(avg_expense), 2) if avg_expense is not None else None,
        "avg_income": round(float(avg_income), 2) if avg_income is not None else None,
    }


def list_accounts(db: Session) -> List[Dict[str, Any]]:
    last_transaction = func.max(Transaction.booking_date)
    rows = db.execute(
        select(
            Transaction.account_number,
            func.count(Transaction.id),
            func.min(Transaction.booking_date),
            last_transaction,
            func.sum(Transaction.amount),
        )
        .group_by(Transaction.account_number)
        .order_by(last_transaction.desc())
    ).all()

    return [
        {
            "account_number": account_number,
            "transaction_count": count,
            "first_transaction": first,
            "last_transaction": last,
            "balance": round(float(balance or 0), 2),
        }
        for account_number, count, first, last, balance in rows
    ]


def get_transaction(db: Session, transaction_id: int) -> Dict[str, Any]:
    return _transaction_dict(_require_transaction(db, transaction_id))


def delete_transaction(db: Session, transaction_id: int) -> None:
    result = db.execute(delete(Transaction).where(Transaction.id == transaction_id))
    if result.rowcount == 0:
        db.rollback()
        raise HTTPException(status_code=404, detail="Transaction not found")
    db.commit()


def import_history(db: Session, limit: int = HISTORY_LIMIT) -> List[Dict[str, Any]]:
    rows = (
        db.execute(select(ImportLog).order_by(ImportLog.imported_at.desc(), ImportLog.id.desc()).limit(limit))
        .scalars()
        .all()
    )
    return [
        {
            "id": row.id,
            "filename": row.filename,
            "total_records": row.total_records,
            "imported_records": row.imported_records,
            "skipped_records": row.skipped_records,
            "error_records": row.error_records,
            "status": row.status,
            "error_message": row.error_message,
            "imported_at": row.imported_at,
            "completed_at": row.completed_at,
        }
        for row in rows
    ]
