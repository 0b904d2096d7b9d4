# schemas/transaction.py

from pydantic import BaseModel, Field, condecimal, field_validator
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..db.enums import Category, TransactionSource, TransactionType

# Defines precision for all financial fields (up to 12 digits total, 2 decimal places)
FinancialDecimal = condecimal(max_digits=12, decimal_places=2)

# Month filter format: YYYY-MM
MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


def _not_in_future(value: date) -> date:
    if value > date.today():
        raise ValueError("Date cannot be in the future")
    return value


class TransactionCreate(BaseModel):
    """Manual transaction entry (what the client sends)."""

    amount: FinancialDecimal = Field(..., gt=Decimal("0"), description="Positive amount with at most 2 decimal places.")
    transaction_type: TransactionType = Field(TransactionType.DEBIT, description="'debit' or 'credit'.")
    category: Category
    occurred_at: date = Field(..., description="Transaction date; must not be in the future.")
    description: str = Field(..., min_length=1, max_length=500)
    notes: Optional[str] = Field(None, max_length=200, description="Notes cannot exceed 200 characters.")

    @field_validator("occurred_at")
    @classmethod
    def check_date(cls, value: date) -> date:
        return _not_in_future(value)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value


class TransactionUpdate(BaseModel):
    """Partial edit of a transaction. Only the provided fields change."""

    amount: Optional[FinancialDecimal] = Field(None, gt=Decimal("0"))
    category: Optional[Category] = None
    occurred_at: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1, max_length=500)
    notes: Optional[str] = Field(None, max_length=200)

    @field_validator("occurred_at")
    @classmethod
    def check_date(cls, value: Optional[date]) -> Optional[date]:
        if value is None:
            return value
        return _not_in_future(value)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("Description is required")
        return value


class TransactionOut(BaseModel):
    """Output schema for a stored transaction."""

    id: str
    amount: Decimal
    transaction_type: TransactionType
    category: Category
    occurred_at: date
    description: str
    bank_name: Optional[str] = None
    source: TransactionSource
    source_message_id: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionFilters(BaseModel):
    """Persisted history filter. All fields optional, combined with AND."""

    month: Optional[str] = Field(None, pattern=MONTH_PATTERN, description="YYYY-MM")
    category: Optional[Category] = None
    bank: Optional[str] = None
