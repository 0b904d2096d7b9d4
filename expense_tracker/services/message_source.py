"""
Message Source: where SMS come from.

``MessageSource`` is the capability interface the pipeline depends on. The
concrete ``InboxMessageSource`` is fed by the device bridge over HTTP: the
phone pushes its inbox and every newly received SMS, together with its
READ/RECEIVE_SMS permission state.
"""

import abc
import logging
from typing import Callable, List, Optional

from ..schemas.sms import IncomingMessage

logger = logging.getLogger(__name__)

MessageCallback = Callable[[IncomingMessage], object]


class Subscription:
    """
    Handle for a live subscription. Cancelling is idempotent; using the handle
    as a context manager guarantees release on every exit path.
    """

    def __init__(self, release: Callable[[], None]):
        self._release = release
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._release()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()


class MessageSource(abc.ABC):

    @abc.abstractmethod
    async def has_permission(self) -> bool:
        """Whether the runtime permission to read/receive SMS is granted."""

    @abc.abstractmethod
    async def read_backlog(self, max_count: int) -> List[IncomingMessage]:
        """Most-recent-first batch of at most max_count messages; empty without permission."""

    @abc.abstractmethod
    async def subscribe(self, on_message: MessageCallback) -> Optional[Subscription]:
        """Push feed of new messages until cancelled; None without permission."""


class InboxMessageSource(MessageSource):
    """In-process inbox filled by the device bridge."""

    def __init__(self, messages: Optional[List[IncomingMessage]] = None, permission_granted: bool = False):
        self._inbox: List[IncomingMessage] = list(messages or [])
        self._permission_granted = permission_granted
        self._listeners: List[MessageCallback] = []

    @property
    def permission_granted(self) -> bool:
        return self._permission_granted

    def set_permission(self, granted: bool) -> None:
        self._permission_granted = granted
        if not granted and self._listeners:
            # Revoked permission stops delivery immediately
            logger.info("SMS permission revoked; dropping %d live listener(s)", len(self._listeners))
            self._listeners.clear()

    async def has_permission(self) -> bool:
        return self._permission_granted

    async def read_backlog(self, max_count: int) -> List[IncomingMessage]:
        if not self._permission_granted:
            logger.info("SMS permission not granted, backlog read returns nothing")
            return []
        newest_first = sorted(self._inbox, key=lambda m: m.received_at, reverse=True)
        return newest_first[:max_count]

    async def subscribe(self, on_message: MessageCallback) -> Optional[Subscription]:
        if not self._permission_granted:
            logger.info("SMS permission not granted, live subscription unavailable")
            return None

        self._listeners.append(on_message)

        def release() -> None:
            if on_message in self._listeners:
                self._listeners.remove(on_message)
            logger.info("SMS listener stopped")

        logger.info("SMS listener started")
        return Subscription(release)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def add_to_inbox(self, message: IncomingMessage) -> None:
        """Backlog-only import (no live delivery)."""
        self._inbox.append(message)

    def deliver(self, message: IncomingMessage) -> int:
        """
        A new SMS arrived on the device: keep it for future backlog reads and
        push it to every live listener. Returns the number of listeners notified.
        """
        self._inbox.append(message)
        if not self._permission_granted:
            return 0
        listeners = list(self._listeners)
        for listener in listeners:
            listener(message)
        return len(listeners)
