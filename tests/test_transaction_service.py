import asyncio
from datetime import date
from decimal import Decimal

from expense_tracker.db.enums import Category, TransactionSource, TransactionType
from expense_tracker.schemas.sms import IngestStatus
from expense_tracker.schemas.transaction import TransactionCreate, TransactionFilters, TransactionUpdate
from expense_tracker.services.budget_service import BudgetService
from expense_tracker.services.raw_message_service import RawMessageService
from expense_tracker.services.transaction_service import TransactionService


def _manual(amount="100.00", transaction_type=TransactionType.DEBIT, category=Category.FOOD,
            occurred_at=date(2024, 3, 10), description="Lunch", notes=None):
    return TransactionCreate(
        amount=Decimal(amount),
        transaction_type=transaction_type,
        category=category,
        occurred_at=occurred_at,
        description=description,
        notes=notes,
    )


async def test_manual_entry_round_trip(db):
    service = TransactionService(db)
    created = await service.create_manual(_manual(notes="with friends"))
    await db.commit()

    stored = await service.query()
    assert [t.id for t in stored] == [created.id]
    assert stored[0].amount == Decimal("100.00")
    assert stored[0].source == TransactionSource.MANUAL
    assert stored[0].bank_name is None
    assert stored[0].source_message_id is None
    assert stored[0].notes == "with friends"


async def test_query_is_newest_first(db):
    service = TransactionService(db)
    await service.create_manual(_manual(occurred_at=date(2024, 3, 1), description="first"))
    await service.create_manual(_manual(occurred_at=date(2024, 3, 20), description="second"))
    await service.create_manual(_manual(occurred_at=date(2024, 2, 15), description="earliest"))
    await db.commit()

    assert [t.description for t in await service.query()] == ["second", "first", "earliest"]


async def test_filters_are_combined(db, ingestion_service, make_message):
    await ingestion_service.ingest(make_message())
    service = TransactionService(db)
    await service.create_manual(_manual(category=Category.SHOPPING, occurred_at=date(2024, 3, 2)))
    await service.create_manual(_manual(category=Category.FOOD, occurred_at=date(2024, 4, 2)))
    await db.commit()

    march = await service.query(TransactionFilters(month="2024-03"))
    assert len(march) == 2

    shopping_in_march = await service.query(TransactionFilters(month="2024-03", category=Category.SHOPPING))
    assert len(shopping_in_march) == 2

    hdfc = await service.query(TransactionFilters(month="2024-03", bank="HDFC Bank"))
    assert [t.description for t in hdfc] == ["Amazon"]

    assert await service.query(TransactionFilters(month="2024-05")) == []


async def test_monthly_expense_total(db):
    service = TransactionService(db)
    await service.create_manual(_manual(amount="100.50", occurred_at=date(2024, 3, 1)))
    await service.create_manual(_manual(amount="200.25", occurred_at=date(2024, 3, 31)))
    await service.create_manual(_manual(amount="999.00", transaction_type=TransactionType.CREDIT, occurred_at=date(2024, 3, 5)))
    await service.create_manual(_manual(amount="50.00", occurred_at=date(2024, 4, 1)))
    await db.commit()

    assert await service.monthly_expense_total("2024-03") == Decimal("300.75")
    assert await service.monthly_expense_total("2024-04") == Decimal("50.00")


async def test_monthly_expense_total_is_zero_when_empty(db):
    assert await TransactionService(db).monthly_expense_total("2024-03") == Decimal("0")


async def test_december_bounds(db):
    service = TransactionService(db)
    await service.create_manual(_manual(amount="10.00", occurred_at=date(2023, 12, 31)))
    await service.create_manual(_manual(amount="20.00", occurred_at=date(2024, 1, 1)))
    await db.commit()

    assert await service.monthly_expense_total("2023-12") == Decimal("10.00")


async def test_total_balance(db):
    service = TransactionService(db)
    assert await service.total_balance() == Decimal("0")

    await service.create_manual(_manual(amount="5000.00", transaction_type=TransactionType.CREDIT, category=Category.OTHERS))
    await service.create_manual(_manual(amount="1250.00"))
    await service.create_manual(_manual(amount="250.50"))
    await db.commit()

    assert await service.total_balance() == Decimal("3499.50")


async def test_category_totals_count_debits_only(db):
    service = TransactionService(db)
    await service.create_manual(_manual(amount="100.00", category=Category.FOOD))
    await service.create_manual(_manual(amount="40.00", category=Category.FOOD, occurred_at=date(2024, 2, 1)))
    await service.create_manual(_manual(amount="60.00", category=Category.BILLS))
    await service.create_manual(_manual(amount="500.00", transaction_type=TransactionType.CREDIT, category=Category.OTHERS))
    await db.commit()

    assert await service.category_totals() == {Category.FOOD: Decimal("140.00"), Category.BILLS: Decimal("60.00")}
    assert await service.category_totals("2024-03") == {Category.FOOD: Decimal("100.00"), Category.BILLS: Decimal("60.00")}


async def test_update_changes_only_given_fields(db):
    service = TransactionService(db)
    created = await service.create_manual(_manual(notes="old note"))
    await db.commit()
    first_updated_at = created.updated_at

    await asyncio.sleep(0.01)
    updated = await service.update_fields(created.id, TransactionUpdate(amount=Decimal("120.00"), category=Category.BILLS))
    await db.commit()

    assert updated.amount == Decimal("120.00")
    assert updated.category == Category.BILLS
    assert updated.description == "Lunch"
    assert updated.notes == "old note"
    assert updated.updated_at > first_updated_at


async def test_update_can_clear_notes(db):
    service = TransactionService(db)
    created = await service.create_manual(_manual(notes="old note"))
    await db.commit()

    updated = await service.update_fields(created.id, TransactionUpdate(notes=None))

    assert updated.notes is None


async def test_update_unknown_transaction(db):
    assert await TransactionService(db).update_fields("missing", TransactionUpdate(notes="x")) is None


async def test_delete_keeps_message_processed(ingestion_service, session_factory, make_message):
    result = await ingestion_service.ingest(make_message())

    async with session_factory() as db:
        assert await TransactionService(db).delete(result.transaction_id) is True
        await db.commit()

    async with session_factory() as db:
        assert await TransactionService(db).get(result.transaction_id) is None
        assert await RawMessageService(db).is_processed("sms-1") is True

    # Deleted stays deleted
    again = await ingestion_service.ingest(make_message())
    assert again.status == IngestStatus.SKIPPED


async def test_delete_unknown_transaction(db):
    assert await TransactionService(db).delete("missing") is False


# --- Budget ---

async def test_budget_unset_by_default(db):
    assert await BudgetService(db).get_budget() is None


async def test_budget_upsert(db):
    service = BudgetService(db)
    await service.set_budget(Decimal("20000.00"))
    await service.set_budget(Decimal("25000.00"))
    await db.commit()

    assert await service.get_budget() == Decimal("25000.00")
