# db/enums.py

import enum
from sqlalchemy import TypeDecorator, String

class TransactionType(str, enum.Enum):
    """Direction of money movement as reported by the bank."""
    DEBIT = "debit"
    CREDIT = "credit"

class TransactionSource(str, enum.Enum):
    """Where a transaction record came from."""
    SMS = "sms"        # Created by the ingestion pipeline
    MANUAL = "manual"  # Entered by the user

class Category(str, enum.Enum):
    """Fixed spending categories. Declaration order is the classification order."""
    FOOD = "Food"
    TRANSPORT = "Transport"
    SHOPPING = "Shopping"
    BILLS = "Bills"
    ENTERTAINMENT = "Entertainment"
    HEALTHCARE = "Healthcare"
    OTHERS = "Others"

# Enums are stored as their string values (portable across SQLite and Postgres)
class EnumString(TypeDecorator):
    """Ensures Enum values are stored as strings."""
    impl = String
    cache_ok = True

    def __init__(self, enum_type, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.enum_type = enum_type

    def process_bind_param(self, value, dialect):
        if value is not None:
            # Accept raw strings too ("debit" as well as TransactionType.DEBIT)
            return self.enum_type(value).value
        return value

    def process_result_value(self, value, dialect):
        if value is not None:
            return self.enum_type(value)
        return value
