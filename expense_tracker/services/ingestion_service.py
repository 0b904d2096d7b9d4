# services/ingestion_service.py

import asyncio
import logging
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..schemas.sms import BacklogScanSummary, IncomingMessage, IngestResult, IngestStatus
from ..schemas.transaction import TransactionOut
from .category_classifier import classify_category
from .event_bus import TransactionEventBus
from .message_source import MessageSource
from .raw_message_service import RawMessageService
from .sms_parser import parse_sms
from .transaction_service import TransactionService

logger = logging.getLogger(__name__)


class IngestionService:
    """
    Turns one incoming SMS into at most one persisted Transaction, no matter
    how many times the same message is observed.

    Per message id: unseen -> stored (unprocessed) -> processed, with or
    without a transaction. Processed is terminal; re-ingesting is a no-op.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        event_bus: Optional[TransactionEventBus] = None,
        unparseable_max_attempts: int = 0,
    ):
        self.session_factory = session_factory
        self.event_bus = event_bus
        # 0 = retry unparseable messages on every scan
        self.unparseable_max_attempts = unparseable_max_attempts

    async def ingest(self, message: IncomingMessage) -> IngestResult:
        """Never raises: failures are logged and reported as IngestStatus.FAILED."""
        created: Optional[TransactionOut] = None

        async with self.session_factory() as db:
            try:
                result, created = await self._ingest(db, message)
            except Exception as exc:
                await db.rollback()
                logger.exception("Error processing SMS %s", message.id)
                return IngestResult(message_id=message.id, status=IngestStatus.FAILED, detail=str(exc))

        # Notify only after the commit above
        if created is not None and self.event_bus is not None:
            await self.event_bus.publish(created)
        return result

    async def _ingest(self, db: AsyncSession, message: IncomingMessage) -> Tuple[IngestResult, Optional[TransactionOut]]:
        messages = RawMessageService(db)
        transactions = TransactionService(db)

        # 1. Dedup on the processed flag
        if await messages.is_processed(message.id):
            logger.debug("SMS %s already processed, skipping", message.id)
            return IngestResult(message_id=message.id, status=IngestStatus.SKIPPED), None

        # 2. Keep the raw message even if parsing fails below
        await messages.store_if_absent(message)
        await db.commit()

        # 3. Parse
        attempts = await messages.record_parse_attempt(message.id)
        draft = parse_sms(message.body, message.sender, message.received_at, message.received_on)
        if draft is None:
            if self.unparseable_max_attempts and attempts >= self.unparseable_max_attempts:
                await messages.mark_processed(message.id, None)
                logger.info("SMS %s unparseable after %d attempts, giving up", message.id, attempts)
            else:
                logger.debug("SMS %s could not be parsed (attempt %d)", message.id, attempts)
            await db.commit()
            return IngestResult(message_id=message.id, status=IngestStatus.UNPARSEABLE), None

        # Secondary dedup: a crash between insert and mark-processed leaves a
        # transaction behind without the flag. Finish the link instead of duplicating.
        existing = await transactions.find_by_source_message(message.id)
        if existing is not None:
            await messages.mark_processed(message.id, existing.id)
            await db.commit()
            logger.warning("SMS %s already had transaction %s; link completed", message.id, existing.id)
            return IngestResult(
                message_id=message.id, status=IngestStatus.LINKED_EXISTING, transaction_id=existing.id
            ), None

        # 4. Insert the transaction and flip the flag in one commit
        category = classify_category(draft.description)
        transaction = await transactions.create_from_draft(draft, category, message.id)
        await messages.mark_processed(message.id, transaction.id)
        await db.commit()

        logger.info(
            "Transaction %s created from SMS %s (%s %s, %s)",
            transaction.id, message.id, transaction.transaction_type.value, transaction.amount, category.value,
        )
        created = TransactionOut.model_validate(transaction)
        return IngestResult(
            message_id=message.id, status=IngestStatus.CREATED, transaction_id=transaction.id
        ), created


class IngestionWorker:
    """
    Single consumer queue in front of IngestionService.

    Every entry point (backlog scan, live push, direct ingest) goes through
    submit(), so ingestion is strictly sequential within the process.
    """

    def __init__(self, service: IngestionService):
        self.service = service
        self._queue: Optional[asyncio.Queue] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _ensure_running(self) -> None:
        if self.running:
            return
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._task = asyncio.get_running_loop().create_task(self._run(), name="sms-ingestion-worker")

    def submit_nowait(self, message: IncomingMessage) -> "asyncio.Future[IngestResult]":
        """Enqueue without waiting; used by live subscriptions."""
        self._ensure_running()
        future = asyncio.get_running_loop().create_future()
        self._queue.put_nowait((message, future))
        return future

    async def submit(self, message: IncomingMessage) -> IngestResult:
        return await self.submit_nowait(message)

    async def drain(self) -> None:
        """Waits until everything queued so far has been ingested."""
        if self._queue is not None and self.running:
            await self._queue.join()

    async def close(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        # Nothing will consume what is left
        if self._queue is not None:
            while not self._queue.empty():
                _, future = self._queue.get_nowait()
                if not future.done():
                    future.cancel()
                self._queue.task_done()

    async def _run(self) -> None:
        while True:
            message, future = await self._queue.get()
            try:
                try:
                    result = await self.service.ingest(message)
                except Exception as exc:
                    # Live pushes never read their future; report instead of raising
                    logger.exception("Ingestion worker failed on SMS %s", message.id)
                    result = IngestResult(message_id=message.id, status=IngestStatus.FAILED, detail=str(exc))
                if not future.done():
                    future.set_result(result)
            except asyncio.CancelledError:
                # close() while this message was in flight
                if not future.done():
                    future.cancel()
                raise
            finally:
                self._queue.task_done()

    async def scan_backlog(self, source: MessageSource, max_count: int) -> BacklogScanSummary:
        """
        Reads the most recent max_count messages and ingests them in the order
        returned. One bad message never aborts the scan.
        """
        summary = BacklogScanSummary()
        try:
            messages = await source.read_backlog(max_count)
        except Exception:
            logger.exception("Failed to read SMS backlog")
            return summary

        logger.info("Found %d SMS messages in backlog", len(messages))
        for message in messages:
            summary.record(await self.submit(message))

        logger.info(
            "Backlog scan done: %d created, %d skipped, %d unparseable, %d failed",
            summary.created, summary.skipped, summary.unparseable, summary.failed,
        )
        return summary
