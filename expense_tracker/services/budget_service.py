# services/budget_service.py

from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.setting import AppSetting, MONTHLY_BUDGET_KEY


class BudgetService:
    """Monthly budget stored as a single upserted setting row."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_budget(self) -> Optional[Decimal]:
        """None means no budget limit has been set."""
        setting = await self.db.get(AppSetting, MONTHLY_BUDGET_KEY)
        if setting is None:
            return None
        try:
            return Decimal(setting.value)
        except InvalidOperation:
            return None

    async def set_budget(self, amount: Decimal) -> Decimal:
        setting = await self.db.get(AppSetting, MONTHLY_BUDGET_KEY)
        if setting is None:
            setting = AppSetting(key=MONTHLY_BUDGET_KEY, value=str(amount))
            self.db.add(setting)
        else:
            setting.value = str(amount)
        await self.db.flush()
        return amount
