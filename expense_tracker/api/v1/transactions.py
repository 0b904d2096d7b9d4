# api/v1/transactions.py

from fastapi import APIRouter, HTTPException, Query, status
from typing import List, Optional

from ..dependencies import DBDependency
from ...db.enums import Category
from ...schemas.transaction import (
    MONTH_PATTERN,
    TransactionCreate,
    TransactionFilters,
    TransactionOut,
    TransactionUpdate,
)
from ...services.transaction_service import TransactionService

router = APIRouter(
    prefix="/transactions",
    tags=["Transactions"]
)


# --- READ All (filtered) ---
@router.get(
    "/",
    response_model=List[TransactionOut],
    summary="List transactions, newest first, optionally filtered by month, category and bank"
)
async def list_transactions(
    db: DBDependency,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM"),
    category: Optional[Category] = None,
    bank: Optional[str] = None,
):
    filters = TransactionFilters(month=month, category=category, bank=bank)
    return await TransactionService(db).query(filters)


# --- CREATE (manual entry) ---
@router.post(
    "/",
    response_model=TransactionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a manual transaction"
)
async def create_transaction(data: TransactionCreate, db: DBDependency):
    return await TransactionService(db).create_manual(data)


# --- READ Single ---
@router.get(
    "/{transaction_id}",
    response_model=TransactionOut,
    summary="Get a transaction by id"
)
async def get_transaction(transaction_id: str, db: DBDependency):
    transaction = await TransactionService(db).get(transaction_id)
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found.")
    return transaction


# --- UPDATE ---
@router.patch(
    "/{transaction_id}",
    response_model=TransactionOut,
    summary="Edit amount, category, date, description or notes"
)
async def update_transaction(transaction_id: str, data: TransactionUpdate, db: DBDependency):
    transaction = await TransactionService(db).update_fields(transaction_id, data)
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found.")
    return transaction


# --- DELETE ---
@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a transaction"
)
async def delete_transaction(transaction_id: str, db: DBDependency):
    # 204 even if not found, to be idempotent (it's gone either way)
    await TransactionService(db).delete(transaction_id)
