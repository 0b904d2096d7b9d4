# models/raw_message.py

from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import String, Text, DateTime, Integer, ForeignKey
from datetime import datetime

from ..db.base import Base

class RawMessage(Base):
    """
    Stores every bank-notification SMS seen by the pipeline, parsed or not.
    This ensures no data is lost and keeps the dedup state per message id.
    """
    __tablename__ = "raw_messages"

    # Provider-assigned id, or the received timestamp (ms) for live messages
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    sender: Mapped[str] = mapped_column(String(64), index=True)
    body: Mapped[str] = mapped_column(Text)
    received_at: Mapped[datetime] = mapped_column(DateTime)

    # Processing status
    is_processed: Mapped[bool] = mapped_column(default=False, index=True)
    parse_attempts: Mapped[int] = mapped_column(Integer, default=0)

    # Link to the cleaned Transaction (if parsing succeeded)
    transaction_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True
    )

    def __repr__(self) -> str:
        return f"<RawMessage {self.id} from={self.sender} processed={self.is_processed}>"
