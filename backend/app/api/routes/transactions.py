from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from backend.app.db import get_db
from backend.app.services import transaction_service

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


class TransactionOut(BaseModel):
    id: int
    account_number: str
    statement_number: Optional[str] = None
    transaction_number: Optional[str] = None
    booking_date: date
    value_date: Optional[date] = None
    counterpart_account: Optional[str] = None
    counterpart_name: Optional[str] = None
    counterpart_address: Optional[str] = None
    counterpart_postal_code: Optional[str] = None
    counterpart_city: Optional[str] = None
    transaction_type: Optional[str] = None
    amount: float
    currency: str
    bic: Optional[str] = None
    country_code: Optional[str] = None
    description: Optional[str] = None
    reference_number: Optional[str] = None
    file_hash: Optional[str] = None
    imported_at: datetime
    updated_at: datetime


class PaginationOut(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class TransactionPageOut(BaseModel):
    transactions: List[TransactionOut]
    pagination: PaginationOut


class TransactionStatsOut(BaseModel):
    total_transactions: int
    accounts_count: int
    total_income: float
    total_expenses: float
    earliest_transaction: Optional[date] = None
    latest_transaction: Optional[date] = None
    avg_expense: Optional[float] = None
    avg_income: Optional[float] = None


class AccountSummaryOut(BaseModel):
    account_number: str
    transaction_count: int
    first_transaction: Optional[date] = None
    last_transaction: Optional[date] = None
    balance: float


@router.get("", response_model=TransactionPageOut)
def list_transactions(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=500),
    account: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
):
    return transaction_service.list_transactions(
        db,
        page=page,
        limit=limit,
        account=account,
        start_date=start_date,
        end_date=end_date,
    )


@router.get("/stats", response_model=TransactionStatsOut)
def transaction_stats(
    account: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return transaction_service.transaction_stats(db, account=account)


@router.get("/accounts", response_model=List[AccountSummaryOut])
def list_accounts(db: Session = Depends(get_db)):
    return transaction_service.list_accounts(db)


@router.get("/{transaction_id}", response_model=TransactionOut)
def get_transaction(transaction_id: int, db: Session = Depends(get_db)):
    return transaction_service.get_transaction(db, transaction_id)


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    transaction_service.delete_transaction(db, transaction_id)
    return {"message": "Transaction deleted successfully"}
