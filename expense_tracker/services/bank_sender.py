# services/bank_sender.py

import re
from typing import Dict, Optional

# Canonical bank names keyed by the carrier-assigned sender id
BANK_NAME_MAP: Dict[str, str] = {
    "AXISBK": "Axis Bank",
    "HDFCBK": "HDFC Bank",
    "ICICIB": "ICICI Bank",
    "SBIIN": "State Bank of India",
    "PNBSMS": "Punjab National Bank",
    "KOTAKB": "Kotak Mahindra Bank",
    "YESBNK": "Yes Bank",
    "INDUSB": "IndusInd Bank",
    "SCBANK": "Standard Chartered",
    "CITIBANK": "Citibank",
    "BOIIND": "Bank of India",
    "UNIONBK": "Union Bank",
    "CANBNK": "Canara Bank",
}

# Optional two-letter operator/circle header: "VM-HDFCBK", "AD-SBIIN"
_SENDER_PATTERN = re.compile(
    r"^(?:[A-Z]{2}-)?(" + "|".join(re.escape(code) for code in BANK_NAME_MAP) + r")$"
)


def _normalise(sender: str) -> str:
    return (sender or "").strip().upper()


def _bank_code(sender: str) -> Optional[str]:
    match = _SENDER_PATTERN.match(_normalise(sender))
    return match.group(1) if match else None


def is_bank_sender(sender: str) -> bool:
    """True if the sender id belongs to a known bank (case and whitespace insensitive)."""
    return _bank_code(sender) is not None


def resolve_bank_name(sender: str) -> str:
    """
    Canonical bank name for a known sender; the raw sender otherwise.
    """
    code = _bank_code(sender)
    if code is None:
        return sender
    return BANK_NAME_MAP[code]
