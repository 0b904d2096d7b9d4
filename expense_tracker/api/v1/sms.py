# api/v1/sms.py

import logging
from fastapi import APIRouter, status
from pydantic import BaseModel

from ..dependencies import SourceDependency, TrackingDependency, WorkerDependency
from ...schemas.sms import BacklogScanSummary, IncomingMessage, IngestResult, PermissionUpdate, TrackingStatus

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/sms",
    tags=["SMS Ingestion & Tracking"]
)


class MessageAccepted(BaseModel):
    message_id: str
    delivered_live: bool


@router.post(
    "/messages",
    response_model=MessageAccepted,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Device bridge push: a new SMS arrived on the phone"
)
async def push_message(message: IncomingMessage, source: SourceDependency):
    """
    Hands the SMS to the live subscription (if tracking is active). Without an
    active subscription the message is kept for the next backlog scan.
    """
    delivered = source.deliver(message)
    return MessageAccepted(message_id=message.id, delivered_live=delivered > 0)


@router.post(
    "/ingest",
    response_model=IngestResult,
    summary="Ingest one SMS now and return the outcome"
)
async def ingest_message(message: IncomingMessage, worker: WorkerDependency):
    return await worker.submit(message)


@router.post("/permission", response_model=TrackingStatus, summary="Device bridge reports SMS permission state")
async def update_permission(data: PermissionUpdate, manager: TrackingDependency):
    logger.info("SMS permission %s", "granted" if data.granted else "revoked")
    return await manager.set_permission(data.granted)


@router.get("/tracking", response_model=TrackingStatus, summary="Is live tracking running?")
async def get_tracking_status(manager: TrackingDependency):
    return await manager.status()


@router.post("/tracking/start", response_model=TrackingStatus, summary="(Re)start tracking: backlog scan + live subscription")
async def start_tracking(manager: TrackingDependency):
    await manager.start()
    return await manager.status()


@router.post("/tracking/stop", response_model=TrackingStatus, summary="Stop live tracking")
async def stop_tracking(manager: TrackingDependency):
    manager.stop()
    return await manager.status()


@router.post("/rescan", response_model=BacklogScanSummary, summary="Scan the SMS backlog again")
async def rescan_backlog(manager: TrackingDependency):
    return await manager.rescan()
