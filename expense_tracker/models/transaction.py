# models/transaction.py

from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, Date, DateTime
from datetime import date, datetime
from decimal import Decimal

from ..db.base import Base
from ..db.enums import Category, TransactionSource, TransactionType, EnumString
from ..utils.dates import utcnow

class Transaction(Base):
    """
    Stores CLEAN, CATEGORIZED money movements, either extracted from a bank
    SMS or entered manually by the user.
    """
    __tablename__ = "transactions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    # --- Money movement ---
    amount: Mapped[Decimal]
    transaction_type: Mapped[TransactionType] = mapped_column(EnumString(TransactionType, 16))
    category: Mapped[Category] = mapped_column(EnumString(Category, 32), index=True)
    occurred_at: Mapped[date] = mapped_column(Date, index=True)
    description: Mapped[str] = mapped_column(Text)

    # --- Provenance ---
    # Only set for SMS-sourced transactions
    bank_name: Mapped[Optional[str]] = mapped_column(String(100), index=True, nullable=True)
    source: Mapped[TransactionSource] = mapped_column(EnumString(TransactionSource, 16), index=True)
    # Unique: one message can never back two transactions
    source_message_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    def __repr__(self) -> str:
        return f"<Transaction {self.id} {self.transaction_type.value} {self.amount} {self.category.value}>"
