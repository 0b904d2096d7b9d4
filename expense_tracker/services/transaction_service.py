# services/transaction_service.py

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..db.enums import Category, TransactionSource, TransactionType
from ..models.transaction import Transaction
from ..schemas.sms import TransactionDraft
from ..schemas.transaction import TransactionCreate, TransactionFilters, TransactionUpdate
from ..utils.dates import month_bounds, utcnow

logger = logging.getLogger(__name__)

ZERO = Decimal("0.00")


def generate_transaction_id() -> str:
    """Time-based id with a random suffix: '1709625600000-3f9a1c2b7'."""
    epoch_ms = int(utcnow().timestamp() * 1000)
    return f"{epoch_ms}-{uuid.uuid4().hex[:9]}"


def _money(value) -> Decimal:
    # SQLite hands sums back as float/Decimal depending on the driver
    if value is None:
        return ZERO
    return Decimal(str(value)).quantize(Decimal("0.01"))


class TransactionService:
    """
    Transaction storage: CRUD, filtered history and the dashboard aggregates.

    Methods add/flush but never commit; the caller owns the unit of work.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # CREATE
    # ------------------------------------------------------------------
    async def create_manual(self, data: TransactionCreate) -> Transaction:
        now = utcnow()
        transaction = Transaction(
            id=str(uuid.uuid4()),
            amount=data.amount,
            transaction_type=data.transaction_type,
            category=data.category,
            occurred_at=data.occurred_at,
            description=data.description,
            bank_name=None,
            source=TransactionSource.MANUAL,
            source_message_id=None,
            notes=data.notes,
            created_at=now,
            updated_at=now,
        )
        self.db.add(transaction)
        await self.db.flush()
        return transaction

    async def create_from_draft(self, draft: TransactionDraft, category: Category, message_id: str) -> Transaction:
        now = utcnow()
        transaction = Transaction(
            id=generate_transaction_id(),
            amount=draft.amount,
            transaction_type=draft.transaction_type,
            category=category,
            occurred_at=draft.occurred_at,
            description=draft.description,
            bank_name=draft.bank_name,
            source=TransactionSource.SMS,
            source_message_id=message_id,
            notes=None,
            created_at=now,
            updated_at=now,
        )
        self.db.add(transaction)
        await self.db.flush()
        return transaction

    # ------------------------------------------------------------------
    # READ
    # ------------------------------------------------------------------
    async def get(self, transaction_id: str) -> Optional[Transaction]:
        return await self.db.get(Transaction, transaction_id)

    async def find_by_source_message(self, message_id: str) -> Optional[Transaction]:
        stmt = select(Transaction).where(Transaction.source_message_id == message_id)
        result = await self.db.execute(stmt)
        return result.scalars().first()

    async def query(self, filters: Optional[TransactionFilters] = None) -> List[Transaction]:
        """Filtered history, newest first. Filters are combined with AND."""
        stmt = select(Transaction)
        if filters is not None:
            if filters.month:
                start, end = month_bounds(filters.month)
                stmt = stmt.where(Transaction.occurred_at >= start, Transaction.occurred_at < end)
            if filters.category:
                stmt = stmt.where(Transaction.category == filters.category)
            if filters.bank:
                stmt = stmt.where(Transaction.bank_name == filters.bank)

        stmt = stmt.order_by(Transaction.occurred_at.desc(), Transaction.created_at.desc())
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # UPDATE / DELETE
    # ------------------------------------------------------------------
    async def update_fields(self, transaction_id: str, data: TransactionUpdate) -> Optional[Transaction]:
        transaction = await self.get(transaction_id)
        if transaction is None:
            return None

        # Update only the fields provided in the request body
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key != "notes":
                continue
            setattr(transaction, key, value)
        transaction.updated_at = utcnow()

        await self.db.flush()
        return transaction

    async def delete(self, transaction_id: str) -> bool:
        """Deletes a transaction. The source message stays processed."""
        result = await self.db.execute(delete(Transaction).where(Transaction.id == transaction_id))
        return (result.rowcount or 0) > 0

    # ------------------------------------------------------------------
    # AGGREGATES
    # ------------------------------------------------------------------
    async def total_balance(self) -> Decimal:
        """All-time credits minus debits."""
        stmt = select(Transaction.transaction_type, func.sum(Transaction.amount)).group_by(Transaction.transaction_type)
        result = await self.db.execute(stmt)
        totals = {TransactionType(row[0]): _money(row[1]) for row in result.all()}
        return totals.get(TransactionType.CREDIT, ZERO) - totals.get(TransactionType.DEBIT, ZERO)

    async def monthly_expense_total(self, month: str) -> Decimal:
        """Sum of debit amounts whose date falls in the 'YYYY-MM' month (0 when none)."""
        start, end = month_bounds(month)
        stmt = select(func.sum(Transaction.amount)).where(
            Transaction.transaction_type == TransactionType.DEBIT,
            Transaction.occurred_at >= start,
            Transaction.occurred_at < end,
        )
        result = await self.db.execute(stmt)
        return _money(result.scalar())

    async def category_totals(self, month: Optional[str] = None) -> Dict[Category, Decimal]:
        """Debit totals per category, optionally restricted to one month."""
        stmt = select(Transaction.category, func.sum(Transaction.amount)).where(
            Transaction.transaction_type == TransactionType.DEBIT
        )
        if month:
            start, end = month_bounds(month)
            stmt = stmt.where(Transaction.occurred_at >= start, Transaction.occurred_at < end)
        stmt = stmt.group_by(Transaction.category)

        result = await self.db.execute(stmt)
        return {Category(row[0]): _money(row[1]) for row in result.all()}
