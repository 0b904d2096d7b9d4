# services/raw_message_service.py

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.raw_message import RawMessage
from ..schemas.sms import IncomingMessage

logger = logging.getLogger(__name__)


class RawMessageService:
    """
    Raw SMS storage and the per-message dedup state.

    Like TransactionService, nothing here commits.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, message_id: str) -> Optional[RawMessage]:
        return await self.db.get(RawMessage, message_id)

    async def is_processed(self, message_id: str) -> bool:
        stmt = select(RawMessage.is_processed).where(RawMessage.id == message_id)
        result = await self.db.execute(stmt)
        return bool(result.scalar())

    async def store_if_absent(self, message: IncomingMessage) -> RawMessage:
        """Inserts the message unless a row with the same id already exists."""
        existing = await self.get(message.id)
        if existing is not None:
            return existing

        raw = RawMessage(
            id=message.id,
            sender=message.sender,
            body=message.body,
            received_at=message.received_at,
            is_processed=False,
            parse_attempts=0,
            transaction_id=None,
        )
        self.db.add(raw)
        await self.db.flush()
        return raw

    async def record_parse_attempt(self, message_id: str) -> int:
        raw = await self.get(message_id)
        if raw is None:
            raise LookupError(f"Raw message {message_id} is not stored")
        raw.parse_attempts = (raw.parse_attempts or 0) + 1
        await self.db.flush()
        return raw.parse_attempts

    async def mark_processed(self, message_id: str, transaction_id: Optional[str]) -> None:
        """
        Flips the processed flag and links the transaction.
        transaction_id=None records the processed-unparseable terminal state.
        """
        raw = await self.get(message_id)
        if raw is None:
            raise LookupError(f"Raw message {message_id} is not stored")
        raw.is_processed = True
        raw.transaction_id = transaction_id
        await self.db.flush()
