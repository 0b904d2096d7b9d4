"""
Field extractors for bank notification SMS bodies.

Each extractor is a pure, total function: it returns the extracted value or
``None`` (amount, direction) / a fallback (date, description) and never
raises. Pattern lists are in priority order; the first pattern that yields a
valid value wins.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Pattern

from ..db.enums import TransactionType

_CURRENCY = r"(?:\bRs\.?|\bINR|₹)"
_NUMBER = r"(\d+(?:,\d+)*(?:\.\d{2})?)"

AMOUNT_PATTERNS: List[Pattern[str]] = [
    re.compile(_CURRENCY + r"\s*" + _NUMBER, re.IGNORECASE),
    re.compile(r"\b(?:debited|credited|spent|paid)\s+" + _CURRENCY + r"?\s*" + _NUMBER, re.IGNORECASE),
    re.compile(r"\b(?:amount|amt)[\s:]+" + _CURRENCY + r"?\s*" + _NUMBER, re.IGNORECASE),
    re.compile(r"\b(?:of|for)\s+" + _CURRENCY + r"?\s*" + _NUMBER, re.IGNORECASE),
]

DEBIT_KEYWORDS = [
    "debited",
    "spent",
    "paid",
    "withdrawn",
    "purchase",
    "debit",
    "deducted",
    "charged",
]

CREDIT_KEYWORDS = [
    "credited",
    "received",
    "deposited",
    "refund",
    "credit",
    "added",
]

# Day first: DD-MM-YYYY, DD/MM/YYYY, DD.MM.YYYY, optionally after "on"
DATE_PATTERNS: List[Pattern[str]] = [
    re.compile(r"(?:\bon\s+)?(\d{2})-(\d{2})-(\d{4})", re.IGNORECASE),
    re.compile(r"(?:\bon\s+)?(\d{2})/(\d{2})/(\d{4})", re.IGNORECASE),
    re.compile(r"(?:\bon\s+)?(\d{2})\.(\d{2})\.(\d{4})", re.IGNORECASE),
]

_MERCHANT = r"([A-Za-z0-9\s]+?)"
_MERCHANT_END = r"(?:\s+on\b|\s+dated\b|\.|$)"

DESCRIPTION_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\b(?:purchase|payment|spent|paid)\s+(?:at|to)\s+" + _MERCHANT + _MERCHANT_END, re.IGNORECASE),
    re.compile(r"\b(?:at|to|for)\s+" + _MERCHANT + _MERCHANT_END, re.IGNORECASE),
]

DESCRIPTION_FALLBACK_LENGTH = 100


def extract_amount(text: str) -> Optional[Decimal]:
    """
    First strictly positive amount matched by AMOUNT_PATTERNS, thousands
    separators removed. The matched literal is taken as-is.
    """
    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        try:
            amount = Decimal(match.group(1).replace(",", ""))
        except InvalidOperation:
            continue
        if amount > 0:
            return amount
    return None


def extract_direction(text: str) -> Optional[TransactionType]:
    """Debit keywords win over credit keywords when both are present."""
    lowered = text.lower()
    if any(keyword in lowered for keyword in DEBIT_KEYWORDS):
        return TransactionType.DEBIT
    if any(keyword in lowered for keyword in CREDIT_KEYWORDS):
        return TransactionType.CREDIT
    return None


def extract_date(text: str, fallback: date) -> date:
    for pattern in DATE_PATTERNS:
        for match in pattern.finditer(text):
            day, month, year = (int(group) for group in match.groups())
            try:
                return date(year, month, day)
            except ValueError:
                # 31-02-2024 and friends: keep looking
                continue
    return fallback


def extract_description(text: str) -> str:
    for pattern in DESCRIPTION_PATTERNS:
        match = pattern.search(text)
        if match:
            merchant = match.group(1).strip()
            if merchant:
                return merchant
    return text[:DESCRIPTION_FALLBACK_LENGTH].strip()
