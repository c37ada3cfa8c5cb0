"""In-process publish/subscribe for run notifications.

Publishing never blocks and never fails: every subscriber owns a bounded
queue that drops its oldest entry when full, and synchronous observers are
called inline with their exceptions logged and swallowed.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from finsync.application.dtos.sync import SyncNotification

logger = logging.getLogger(__name__)

DEFAULT_BUFFER_SIZE = 100

NotificationObserver = Callable[[SyncNotification], None]

_CLOSED = object()


class Subscription:
    """A subscriber's view of the channel."""

    def __init__(self, maxsize: int):
        # One extra slot so the close marker always fits
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize + 1)
        self._maxsize = maxsize
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def offer(self, notification: SyncNotification) -> None:
        if self._closed:
            return
        if self._queue.qsize() >= self._maxsize:
            self._queue.get_nowait()
            self.dropped += 1
        self._queue.put_nowait(notification)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

    def pending(self) -> list[SyncNotification]:
        """Drain what is buffered right now without waiting."""
        items = []
        while not self._queue.empty():
            item = self._queue.get_nowait()
            if item is _CLOSED:
                self._queue.put_nowait(_CLOSED)
                break
            items.append(item)
        return items

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> SyncNotification:
        item = await self._queue.get()
        if item is _CLOSED:
            self._queue.put_nowait(_CLOSED)
            raise StopAsyncIteration
        return item


class NotificationChannel:
    """Fan out notifications to queue subscribers and inline observers."""

    def __init__(self, buffer_size: int = DEFAULT_BUFFER_SIZE):
        if buffer_size < 1:
            msg = "buffer_size must be at least 1"
            raise ValueError(msg)
        self._buffer_size = buffer_size
        self._subscriptions: list[Subscription] = []
        self._observers: list[NotificationObserver] = []

    def subscribe(self, maxsize: Optional[int] = None) -> Subscription:
        subscription = Subscription(maxsize or self._buffer_size)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
        subscription.close()

    def add_observer(self, observer: NotificationObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: NotificationObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def publish(self, notification: SyncNotification) -> None:
        for subscription in list(self._subscriptions):
            subscription.offer(notification)
        for observer in list(self._observers):
            try:
                observer(notification)
            except Exception:
                logger.warning(
                    "Notification observer %r failed on %s",
                    observer,
                    notification.notification_type.value,
                    exc_info=True,
                )

    def close(self) -> None:
        """Signal end of stream to every subscriber."""
        for subscription in self._subscriptions:
            subscription.close()
        self._subscriptions.clear()
