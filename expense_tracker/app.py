# app.py (Expense Tracker Backend: SMS pipeline + manual entry)

import logging
from fastapi import FastAPI, Depends
from contextlib import asynccontextmanager

from . import config
from .api.dependencies import verify_api_key
from .db.database import AsyncSessionLocal, create_db_and_tables, engine
from .schemas.transaction import TransactionOut
from .services.event_bus import TransactionEventBus
from .services.ingestion_service import IngestionService, IngestionWorker
from .services.message_source import InboxMessageSource
from .services.tracking_manager import TrackingManager
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)


def _log_new_transaction(transaction: TransactionOut) -> None:
    logger.info(
        "New %s transaction %s: %s %s (%s)",
        transaction.source.value, transaction.id, transaction.transaction_type.value,
        transaction.amount, transaction.category.value,
    )


def build_tracking(app: FastAPI, session_factory=AsyncSessionLocal) -> TrackingManager:
    """Composition root for the SMS pipeline; everything hangs off app.state."""
    event_bus = TransactionEventBus()
    source = InboxMessageSource(permission_granted=config.SMS_PERMISSION_GRANTED)
    service = IngestionService(
        session_factory,
        event_bus=event_bus,
        unparseable_max_attempts=config.SMS_UNPARSEABLE_MAX_ATTEMPTS,
    )
    worker = IngestionWorker(service)
    manager = TrackingManager(
        source,
        worker,
        event_bus=event_bus,
        backlog_max_count=config.SMS_BACKLOG_MAX_COUNT,
        default_listener=_log_new_transaction,
    )

    app.state.event_bus = event_bus
    app.state.message_source = source
    app.state.ingestion_worker = worker
    app.state.tracking_manager = manager
    return manager


# --- Application Lifespan Context ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    # STARTUP: logging, tables, SMS tracking
    setup_logging(config.LOG_LEVEL)
    logger.info("Application Startup: Initializing services...")
    await create_db_and_tables()

    manager = build_tracking(app)
    if config.SMS_TRACKING_AUTOSTART:
        await manager.start()

    yield

    # SHUTDOWN: release the subscription before the worker and the engine
    logger.info("Application Shutdown: Cleaning up resources...")
    manager.stop()
    await app.state.ingestion_worker.close()
    await engine.dispose()


from .api.v1.transactions import router as transactions_router
from .api.v1.dashboard import router as dashboard_router
from .api.v1.sms import router as sms_router


app = FastAPI(
    title="Expense Tracker Backend",
    description="Tracks spending from bank SMS notifications and manual entries.",
    version="1.0.0",
    lifespan=lifespan,
)


# Root Endpoint (basic health check)
@app.get("/", tags=["Health"])
def read_root():
    return {"message": "Expense Tracker backend is running. Endpoints live under /api/v1/..."}

# -----------------------------------------------------------
# ROUTER REGISTRATION (all API routes require X-API-Key)
# -----------------------------------------------------------

API_KEY_GUARD = [Depends(verify_api_key)]

app.include_router(transactions_router, prefix="/api/v1", dependencies=API_KEY_GUARD)
app.include_router(dashboard_router, prefix="/api/v1", dependencies=API_KEY_GUARD)
app.include_router(sms_router, prefix="/api/v1", dependencies=API_KEY_GUARD)
