# api/v1/dashboard.py

from datetime import date
from fastapi import APIRouter, Query
from typing import Dict, Optional
from decimal import Decimal

from ..dependencies import DBDependency
from ...schemas.dashboard import BudgetIn, BudgetOut, DashboardSummary
from ...schemas.transaction import MONTH_PATTERN
from ...services.budget_service import BudgetService
from ...services.transaction_service import TransactionService
from ...utils.dates import month_key

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard & Budget"]
)


@router.get(
    "/summary",
    response_model=DashboardSummary,
    summary="Balance, month's expenses, budget status and category split"
)
async def get_summary(
    db: DBDependency,
    month: Optional[str] = Query(None, pattern=MONTH_PATTERN, description="YYYY-MM, defaults to the current month"),
):
    month = month or month_key(date.today())
    transactions = TransactionService(db)

    total_balance = await transactions.total_balance()
    monthly_expenses = await transactions.monthly_expense_total(month)
    category_totals = await transactions.category_totals(month)
    budget = await BudgetService(db).get_budget()

    return DashboardSummary(
        month=month,
        total_balance=total_balance,
        monthly_expenses=monthly_expenses,
        budget=budget,
        budget_remaining=(budget - monthly_expenses) if budget is not None else None,
        category_totals={category.value: total for category, total in category_totals.items()},
    )


@router.get(
    "/category-totals",
    response_model=Dict[str, Decimal],
    summary="All-time debit totals per category"
)
async def get_category_totals(db: DBDependency):
    totals = await TransactionService(db).category_totals()
    return {category.value: total for category, total in totals.items()}


@router.get("/budget", response_model=BudgetOut, summary="Current monthly budget (null when unset)")
async def get_budget(db: DBDependency):
    return BudgetOut(amount=await BudgetService(db).get_budget())


@router.put("/budget", response_model=BudgetOut, summary="Set the monthly budget")
async def set_budget(data: BudgetIn, db: DBDependency):
    return BudgetOut(amount=await BudgetService(db).set_budget(data.amount))
