# services/event_bus.py

import inspect
import logging
from typing import Awaitable, Callable, List, Union

from ..schemas.transaction import TransactionOut

logger = logging.getLogger(__name__)

TransactionListener = Callable[[TransactionOut], Union[None, Awaitable[None]]]


class TransactionEventBus:
    """
    Fan-out of "transaction created" events to registered listeners.

    publish() is only called after the transaction is committed, so a listener
    never sees a record that could still be rolled back.
    """

    def __init__(self):
        self._listeners: List[TransactionListener] = []

    def subscribe(self, listener: TransactionListener) -> Callable[[], None]:
        """Registers a listener (sync or async) and returns its unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def publish(self, transaction: TransactionOut) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(transaction)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                # The write is already durable; a broken listener must not undo it
                logger.exception("Transaction listener %r failed for %s", listener, transaction.id)
