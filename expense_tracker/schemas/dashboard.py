# schemas/dashboard.py

from pydantic import BaseModel, Field, condecimal
from decimal import Decimal
from typing import Dict, Optional

FinancialDecimal = condecimal(max_digits=12, decimal_places=2)


class BudgetIn(BaseModel):
    amount: FinancialDecimal = Field(..., gt=Decimal("0"), description="Monthly budget limit.")


class BudgetOut(BaseModel):
    # None means no budget limit has been set
    amount: Optional[Decimal] = None


class DashboardSummary(BaseModel):
    """Everything the dashboard screen renders for one month."""

    month: str = Field(..., description="YYYY-MM")
    total_balance: Decimal = Field(..., description="All-time credits minus debits.")
    monthly_expenses: Decimal = Field(..., description="Sum of debit amounts in the month.")
    budget: Optional[Decimal] = None
    budget_remaining: Optional[Decimal] = Field(None, description="budget - monthly_expenses; null when no budget is set.")
    category_totals: Dict[str, Decimal] = Field(default_factory=dict)
