# api/dependencies.py

import secrets
from typing import Annotated
from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from .. import config
from ..db.database import get_db
from ..services.ingestion_service import IngestionWorker
from ..services.message_source import InboxMessageSource
from ..services.tracking_manager import TrackingManager

# Database dependency type for convenience
DBDependency = Annotated[AsyncSession, Depends(get_db)]


# --- Tracking components (built once in the app lifespan) ---

def get_tracking_manager(request: Request) -> TrackingManager:
    return request.app.state.tracking_manager


def get_ingestion_worker(request: Request) -> IngestionWorker:
    return request.app.state.ingestion_worker


def get_message_source(request: Request) -> InboxMessageSource:
    return request.app.state.message_source


TrackingDependency = Annotated[TrackingManager, Depends(get_tracking_manager)]
WorkerDependency = Annotated[IngestionWorker, Depends(get_ingestion_worker)]
SourceDependency = Annotated[InboxMessageSource, Depends(get_message_source)]


# --- API key validation ---

def get_expected_api_key() -> str:
    return config.API_KEY


def verify_api_key(x_api_key: str = Header(..., alias="X-API-Key")):
    """
    Validates the API key sent in the X-API-Key header.
    """
    expected_key = get_expected_api_key()

    # Server Configuration Error (500)
    if not expected_key:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Server configuration error: EXPENSE_TRACKER_API_KEY not set for secure validation."
        )

    # Key Validation (401 Unauthorized)
    if not secrets.compare_digest(x_api_key, expected_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API Key provided"
        )

    return x_api_key
