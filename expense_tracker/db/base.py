# db/base.py

from decimal import Decimal
from sqlalchemy import Numeric
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase

# Define the common base class for all models
class Base(AsyncAttrs, DeclarativeBase):
    __abstract__ = True

    type_annotation_map = {
        # Money columns: 12 digits total, 2 decimal places
        Decimal: Numeric(12, 2),
    }
