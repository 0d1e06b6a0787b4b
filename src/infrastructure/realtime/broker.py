"""In-process realtime notifications for inserted rows.

Subscribers register for one table with a single ``column == value``
filter. ``publish`` is called after the inserting transaction commits; it
only queues the notification. Each subscription has its own delivery task,
so a subscriber sees notifications in publish order and a slow callback
never holds up the publisher or other subscribers.
"""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol
from uuid import UUID, uuid4

import structlog

from core.config import Settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class ChangeNotification:
    """An insert on ``table``.

    ``record`` holds only the primary key and filter columns; subscribers
    re-read the row to get display fields.
    """

    table: str
    record: dict[str, Any]
    event_type: str = "INSERT"
    commit_timestamp: datetime = field(default_factory=datetime.utcnow)


NotificationCallback = Callable[[ChangeNotification], Awaitable[None]]


@dataclass
class Subscription:
    """Handle returned by ``subscribe``; release it with ``unsubscribe``."""

    table: str
    column: str
    value: str
    callback: NotificationCallback
    id: UUID = field(default_factory=uuid4)
    active: bool = True
    _broker: "IRealtimeBroker | None" = field(default=None, repr=False)

    def matches(self, notification: ChangeNotification) -> bool:
        return (
            self.active
            and notification.table == self.table
            and str(notification.record.get(self.column)) == self.value
        )

    def unsubscribe(self) -> None:
        """Stop delivery. Safe to call more than once."""
        if self._broker is not None:
            self._broker.unsubscribe(self)
        self.active = False


class IRealtimeBroker(Protocol):
    """Push channel for insert notifications."""

    def subscribe(
        self, table: str, column: str, value: Any, callback: NotificationCallback
    ) -> Subscription: ...

    def unsubscribe(self, subscription: Subscription) -> None: ...

    async def publish(self, notification: ChangeNotification) -> int: ...

    async def drain(self) -> None: ...

    async def aclose(self) -> None: ...


DeliveryQueue = asyncio.Queue[ChangeNotification | None]


class RealtimeBroker:
    """Delivers notifications to in-process subscribers."""

    def __init__(self) -> None:
        self._subscriptions: dict[UUID, Subscription] = {}
        self._queues: dict[UUID, DeliveryQueue] = {}
        self._workers: set[asyncio.Task[None]] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def subscribe(
        self, table: str, column: str, value: Any, callback: NotificationCallback
    ) -> Subscription:
        """Register ``callback`` for inserts on ``table`` where ``column == value``."""
        subscription = Subscription(
            table=table,
            column=column,
            value=str(value),
            callback=callback,
            _broker=self,
        )
        self._subscriptions[subscription.id] = subscription
        logger.debug(
            "realtime_subscribed",
            table=table,
            column=column,
            value=subscription.value,
            subscription_id=str(subscription.id),
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.active = False
        if self._subscriptions.pop(subscription.id, None) is not None:
            logger.debug(
                "realtime_unsubscribed",
                subscription_id=str(subscription.id),
            )
        queue = self._queues.pop(subscription.id, None)
        if queue is not None:
            queue.put_nowait(None)  # ends the delivery task

    async def publish(self, notification: ChangeNotification) -> int:
        """Queue the notification for every matching subscriber.

        Returns the number of subscriptions it was queued for. Callbacks run
        later on each subscription's delivery task.
        """
        queued = 0
        for subscription in list(self._subscriptions.values()):
            if subscription.matches(notification):
                self._queue_for(subscription).put_nowait(notification)
                queued += 1
        return queued

    async def drain(self) -> None:
        """Wait until every queued notification has been handled."""
        while True:
            await asyncio.gather(*(q.join() for q in list(self._queues.values())))
            # Callbacks may have published more
            if all(q.empty() for q in self._queues.values()):
                return

    async def aclose(self) -> None:
        """Release every subscription and wait for delivery tasks to finish."""
        for subscription in list(self._subscriptions.values()):
            subscription.unsubscribe()
        await asyncio.gather(*self._workers, return_exceptions=True)

    def _queue_for(self, subscription: Subscription) -> DeliveryQueue:
        queue = self._queues.get(subscription.id)
        if queue is None:
            queue = asyncio.Queue()
            self._queues[subscription.id] = queue
            worker = asyncio.create_task(self._deliver(subscription, queue))
            self._workers.add(worker)
            worker.add_done_callback(self._workers.discard)
        return queue

    async def _deliver(self, subscription: Subscription, queue: DeliveryQueue) -> None:
        """Run one subscription's callbacks in order until it is released.

        A failing callback is logged and later notifications still arrive.
        """
        while True:
            notification = await queue.get()
            try:
                if notification is None:
                    return
                # Released while this notification was queued
                if subscription.active:
                    await subscription.callback(notification)
            except Exception:
                logger.exception(
                    "realtime_callback_failed",
                    table=subscription.table,
                    subscription_id=str(subscription.id),
                )
            finally:
                queue.task_done()


class NullRealtimeBroker:
    """No-op broker used when realtime delivery is disabled."""

    def subscribe(
        self, table: str, column: str, value: Any, callback: NotificationCallback
    ) -> Subscription:
        return Subscription(
            table=table,
            column=column,
            value=str(value),
            callback=callback,
            active=False,
        )

    def unsubscribe(self, subscription: Subscription) -> None:
        subscription.active = False

    async def publish(self, notification: ChangeNotification) -> int:
        return 0

    async def drain(self) -> None:
        return None

    async def aclose(self) -> None:
        return None


def create_broker(settings: Settings) -> IRealtimeBroker:
    """Pick the broker implementation for this process."""
    if settings.realtime_enabled:
        return RealtimeBroker()
    logger.info("realtime_disabled")
    return NullRealtimeBroker()
