from datetime import date, datetime
from decimal import Decimal

from expense_tracker.db.enums import TransactionType
from expense_tracker.services.sms_parser import parse_sms

RECEIVED_AT = datetime(2024, 3, 6, 9, 30)


def test_parses_hdfc_purchase():
    draft = parse_sms(
        "Rs.1,250.00 debited from your account on 05-03-2024 for purchase at Amazon",
        "HDFCBK",
        RECEIVED_AT,
    )

    assert draft is not None
    assert draft.amount == Decimal("1250.00")
    assert draft.transaction_type == TransactionType.DEBIT
    assert draft.occurred_at == date(2024, 3, 5)
    assert draft.bank_name == "HDFC Bank"
    assert draft.description == "Amazon"


def test_credit_message_from_prefixed_sender():
    draft = parse_sms("INR 25,000.00 credited to your a/c XX1234 on 01/03/2024", "AD-SBIIN", RECEIVED_AT)

    assert draft is not None
    assert draft.transaction_type == TransactionType.CREDIT
    assert draft.amount == Decimal("25000.00")
    assert draft.bank_name == "State Bank of India"
    assert draft.occurred_at == date(2024, 3, 1)


def test_non_bank_sender_is_rejected_before_parsing():
    assert parse_sms("Rs.500 debited for purchase at Store", "RANDOM123", RECEIVED_AT) is None


def test_zero_amount_is_rejected():
    assert parse_sms("Rs.0 debited from your account", "HDFCBK", RECEIVED_AT) is None


def test_missing_direction_is_rejected():
    assert parse_sms("Your card statement of Rs.4,500.00 is ready", "ICICIB", RECEIVED_AT) is None


def test_missing_amount_is_rejected():
    assert parse_sms("Your account has been debited", "AXISBK", RECEIVED_AT) is None


def test_date_falls_back_to_receipt_date():
    draft = parse_sms("Rs.80 spent at Metro Card", "KOTAKB", RECEIVED_AT)

    assert draft is not None
    assert draft.occurred_at == date(2024, 3, 6)
    assert draft.description == "Metro Card"


def test_device_day_wins_over_utc_day():
    # 01:00 IST on 1 April is still 31 March in UTC
    draft = parse_sms("Rs.500 debited at Swiggy", "HDFCBK", datetime(2024, 3, 31, 19, 30), received_on=date(2024, 4, 1))

    assert draft is not None
    assert draft.occurred_at == date(2024, 4, 1)
