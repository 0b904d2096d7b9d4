import pytest
import pytest_asyncio
from datetime import datetime
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine, AsyncSession

from expense_tracker.db.base import Base
from expense_tracker.models import raw_message, setting, transaction  # noqa: F401
from expense_tracker.schemas.sms import IncomingMessage
from expense_tracker.services.event_bus import TransactionEventBus
from expense_tracker.services.ingestion_service import IngestionService, IngestionWorker
from expense_tracker.services.message_source import InboxMessageSource
from expense_tracker.services.tracking_manager import TrackingManager

HDFC_PURCHASE = "Rs.1,250.00 debited from your account on 05-03-2024 for purchase at Amazon"


@pytest_asyncio.fixture
async def engine(tmp_path):
    # Fresh SQLite file per test; every session gets its own connection
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'expenses.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def event_bus():
    return TransactionEventBus()


@pytest.fixture
def ingestion_service(session_factory, event_bus):
    return IngestionService(session_factory, event_bus=event_bus)


@pytest_asyncio.fixture
async def worker(ingestion_service):
    worker = IngestionWorker(ingestion_service)
    yield worker
    await worker.close()


@pytest.fixture
def source():
    return InboxMessageSource(permission_granted=True)


@pytest.fixture
def manager(source, worker, event_bus):
    manager = TrackingManager(source, worker, event_bus=event_bus, backlog_max_count=1000)
    yield manager
    manager.stop()


@pytest.fixture
def make_message():
    def _make(body=HDFC_PURCHASE, sender="HDFCBK", message_id="sms-1", received_at=None):
        return IncomingMessage(
            id=message_id,
            sender=sender,
            body=body,
            received_at=received_at or datetime(2024, 3, 6, 9, 30),
        )
    return _make
