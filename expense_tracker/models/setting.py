# models/setting.py

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String

from ..db.base import Base

MONTHLY_BUDGET_KEY = "monthly_budget"

class AppSetting(Base):
    """Single-valued application settings (e.g. the monthly budget)."""
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(String(255))
