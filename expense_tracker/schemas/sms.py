# schemas/sms.py

import enum
from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from ..db.enums import TransactionType
from ..utils.dates import to_naive_utc


class IncomingMessage(BaseModel):
    """An SMS as delivered by the device (backlog read or live push)."""

    id: Optional[str] = Field(None, max_length=64, description="Provider id; derived from received_at when absent.")
    sender: str = Field(..., max_length=64, description="Originating address, e.g. 'VM-HDFCBK'.")
    body: str
    received_at: datetime
    received_on: Optional[date] = Field(None, description="Calendar day on the device; taken from received_at before UTC conversion.")

    @model_validator(mode="after")
    def normalise(self) -> "IncomingMessage":
        if self.received_on is None:
            # The sender's own offset decides the day, not UTC
            self.received_on = self.received_at.date()
        self.received_at = to_naive_utc(self.received_at)
        if not self.id:
            # Live messages have no provider id; the timestamp (ms) stands in
            epoch_ms = int(self.received_at.replace(tzinfo=timezone.utc).timestamp() * 1000)
            self.id = str(epoch_ms)
        return self


class TransactionDraft(BaseModel):
    """Structured extraction result. Never persisted."""

    amount: Decimal
    transaction_type: TransactionType
    occurred_at: date
    bank_name: str
    description: str


class IngestStatus(str, enum.Enum):
    CREATED = "created"                  # New transaction persisted
    SKIPPED = "skipped"                  # Message already processed
    LINKED_EXISTING = "linked_existing"  # Transaction existed, only the link was completed
    UNPARSEABLE = "unparseable"          # Not a recognisable bank transaction
    FAILED = "failed"                    # Storage error; retried on next scan


class IngestResult(BaseModel):
    message_id: str
    status: IngestStatus
    transaction_id: Optional[str] = None
    detail: Optional[str] = None


class BacklogScanSummary(BaseModel):
    scanned: int = 0
    created: int = 0
    skipped: int = 0
    linked_existing: int = 0
    unparseable: int = 0
    failed: int = 0

    def record(self, result: IngestResult) -> None:
        self.scanned += 1
        field = result.status.value
        setattr(self, field, getattr(self, field) + 1)


class PermissionUpdate(BaseModel):
    granted: bool


class TrackingStatus(BaseModel):
    active: bool
    permission_granted: bool
