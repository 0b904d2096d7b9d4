# services/sms_parser.py

import logging
from datetime import date, datetime
from typing import Optional

from ..schemas.sms import TransactionDraft
from .bank_sender import is_bank_sender, resolve_bank_name
from .sms_extractors import extract_amount, extract_date, extract_description, extract_direction

logger = logging.getLogger(__name__)


def parse_sms(
    body: str,
    sender: str,
    received_at: datetime,
    received_on: Optional[date] = None,
) -> Optional[TransactionDraft]:
    """
    Turns one bank notification into a TransactionDraft, or None when the
    message is not a parseable bank transaction.

    All-or-nothing: a draft is produced only when the sender is a known bank
    and both the amount and the direction were found.

    received_on is the device-local calendar day of the message; it wins over
    received_at.date() as the date fallback.
    """
    # 1. Hard gate: non-bank senders are never parsed
    if not is_bank_sender(sender):
        logger.debug("Rejected SMS from non-bank sender %r", sender)
        return None

    # 2. Amount
    amount = extract_amount(body)
    if amount is None:
        logger.debug("Rejected SMS from %s: no amount", sender)
        return None

    # 3. Direction
    transaction_type = extract_direction(body)
    if transaction_type is None:
        logger.debug("Rejected SMS from %s: no debit/credit keyword", sender)
        return None

    # 4-6. Date, bank and description always succeed (fallbacks)
    return TransactionDraft(
        amount=amount,
        transaction_type=transaction_type,
        occurred_at=extract_date(body, fallback=received_on or received_at.date()),
        bank_name=resolve_bank_name(sender),
        description=extract_description(body),
    )
