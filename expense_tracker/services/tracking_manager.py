# services/tracking_manager.py

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

from ..schemas.sms import BacklogScanSummary, TrackingStatus
from .event_bus import TransactionEventBus, TransactionListener
from .ingestion_service import IngestionWorker
from .message_source import InboxMessageSource, MessageSource, Subscription

logger = logging.getLogger(__name__)

DEFAULT_BACKLOG_MAX_COUNT = 1000


class TrackingManager:
    """
    Owns the one live SMS subscription of the process.

    An instance lives on the application's composition root (app.state);
    start() replaces any running subscription instead of stacking a second one.
    """

    def __init__(
        self,
        source: MessageSource,
        worker: IngestionWorker,
        event_bus: Optional[TransactionEventBus] = None,
        backlog_max_count: int = DEFAULT_BACKLOG_MAX_COUNT,
        default_listener: Optional[TransactionListener] = None,
    ):
        self.source = source
        self.worker = worker
        self.event_bus = event_bus
        self.backlog_max_count = backlog_max_count
        # Used when start() is called without a callback (e.g. permission grant)
        self.default_listener = default_listener

        self._subscription: Optional[Subscription] = None
        self._unsubscribe_listener: Optional[Callable[[], None]] = None
        self._lock = asyncio.Lock()
        self.last_scan: Optional[BacklogScanSummary] = None

    @property
    def is_active(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def status(self) -> TrackingStatus:
        return TrackingStatus(active=self.is_active, permission_granted=await self.source.has_permission())

    async def start(self, on_transaction_created: Optional[TransactionListener] = None) -> Optional[Subscription]:
        """
        Stops any running subscription, ingests the backlog once, then opens
        the live subscription. Returns the subscription handle, or None when
        SMS permission is missing.
        """
        async with self._lock:
            if self._subscription is not None:
                logger.info("Stopping existing SMS tracking...")
            self.stop()

            if not await self.source.has_permission():
                logger.info("SMS permission not granted, SMS auto-tracking disabled")
                return None

            listener = on_transaction_created or self.default_listener
            if listener is not None and self.event_bus is not None:
                self._unsubscribe_listener = self.event_bus.subscribe(listener)

            logger.info("Starting SMS tracking...")
            self.last_scan = await self.worker.scan_backlog(self.source, self.backlog_max_count)

            try:
                subscription = await self.source.subscribe(self.worker.submit_nowait)
            except Exception:
                logger.exception("Error starting SMS listener")
                subscription = None

            if subscription is None:
                logger.warning("Failed to start SMS tracking")
                self._release_listener()
                return None

            self._subscription = subscription
            logger.info("SMS tracking started")
            return subscription

    def stop(self) -> None:
        """Cancels the live subscription if any. Safe to call repeatedly."""
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None
            logger.info("SMS tracking stopped")
        self._release_listener()

    def _release_listener(self) -> None:
        if self._unsubscribe_listener is not None:
            self._unsubscribe_listener()
            self._unsubscribe_listener = None

    async def rescan(self) -> BacklogScanSummary:
        """User-initiated refresh: one more backlog scan, subscription untouched."""
        self.last_scan = await self.worker.scan_backlog(self.source, self.backlog_max_count)
        return self.last_scan

    async def set_permission(self, granted: bool) -> TrackingStatus:
        """
        Permission-grant flow of the device bridge: granting starts tracking,
        revoking stops it.
        """
        if isinstance(self.source, InboxMessageSource):
            self.source.set_permission(granted)
        if granted:
            if not self.is_active:
                await self.start()
        else:
            self.stop()
        return await self.status()

    @asynccontextmanager
    async def tracking(self, on_transaction_created: Optional[TransactionListener] = None) -> AsyncIterator[Optional[Subscription]]:
        """Scoped tracking: the subscription is released on every exit path."""
        subscription = await self.start(on_transaction_created)
        try:
            yield subscription
        finally:
            self.stop()
