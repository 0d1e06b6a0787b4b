"""Realtime event chat view.

Holds the rendered message list for one event, fed by a history fetch and
then by insert notifications. Notifications carry only keys, so each one
triggers a follow-up read of the full row before it is appended.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from enum import StrEnum
from uuid import UUID

import structlog

from api.v1.schemas.message import MessageViewResponse
from clients.api_client import TwoGetherClient
from clients.errors import ClientError, ErrorKind
from domain.services.chat_service import MESSAGES_TABLE
from infrastructure.realtime.broker import (
    ChangeNotification,
    IRealtimeBroker,
    Subscription,
)

logger = structlog.get_logger()


class ChatState(StrEnum):
    """Load state of the message list."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class EventChatView:
    """Message list, composer and realtime subscription for one event.

    Messages are kept in arrival order and are never re-sorted. Sending
    does not append locally; the sender's own message arrives through the
    subscription like everyone else's.
    """

    def __init__(self, api: TwoGetherClient, realtime: IRealtimeBroker) -> None:
        self._api = api
        self._realtime = realtime
        self._subscription: Subscription | None = None
        self._seen: set[UUID] = set()
        self._generation = 0

        self.event_id: UUID | None = None
        self.messages: list[MessageViewResponse] = []
        self.state = ChatState.IDLE
        self.error: ErrorKind | None = None
        self.composer = ""
        self.sending = False
        self.send_error: ErrorKind | None = None

    @property
    def is_subscribed(self) -> bool:
        return self._subscription is not None and self._subscription.active

    async def mount(self, event_id: UUID) -> None:
        """Load an event's history and start following new messages.

        A failed history fetch leaves an empty list in the error state; the
        subscription is opened either way.
        """
        self.unmount()
        self._generation += 1
        generation = self._generation
        self.event_id = event_id
        self.messages = []
        self._seen = set()
        self.error = None
        self.state = ChatState.LOADING

        try:
            history = await self._api.list_event_messages(event_id)
        except ClientError as e:
            if generation != self._generation:
                return
            logger.warning(
                "chat_history_failed",
                event_id=str(event_id),
                error_kind=e.kind.value,
            )
            self.state = ChatState.ERROR
            self.error = e.kind
        else:
            # Superseded by another mount or an unmount while loading
            if generation != self._generation:
                logger.debug("chat_history_discarded", event_id=str(event_id))
                return
            for message in history:
                self._append(message)
            self.state = ChatState.READY

        subscription: Subscription | None = None

        async def on_insert(notification: ChangeNotification) -> None:
            await self._on_insert(subscription, notification)

        subscription = self._realtime.subscribe(MESSAGES_TABLE, "event_id", event_id, on_insert)
        self._subscription = subscription
        logger.debug("chat_subscribed", event_id=str(event_id))

    async def switch_event(self, event_id: UUID) -> None:
        """Release the current subscription and mount another event."""
        await self.mount(event_id)

    def unmount(self) -> None:
        """Release the subscription. Later notifications are ignored."""
        self._generation += 1
        if self._subscription is not None:
            self._subscription.unsubscribe()
            logger.debug("chat_unsubscribed", event_id=str(self.event_id))
        self._subscription = None

    @asynccontextmanager
    async def mounted(self, event_id: UUID) -> AsyncIterator["EventChatView"]:
        """Mount for the duration of a block; always released on exit."""
        try:
            await self.mount(event_id)
            yield self
        finally:
            self.unmount()

    async def send(self) -> bool:
        """Send the composer text. Returns True when the service accepted it.

        Does nothing while another send is in flight or when the trimmed
        composer is empty. A failed send keeps the composer text.
        """
        content = self.composer.strip()
        if not content or self.sending or self.event_id is None:
            return False

        self.sending = True
        self.send_error = None
        try:
            await self._api.send_event_message(self.event_id, content)
        except ClientError as e:
            logger.warning(
                "chat_send_failed",
                event_id=str(self.event_id),
                error_kind=e.kind.value,
            )
            self.send_error = e.kind
            return False
        finally:
            self.sending = False

        self.composer = ""
        return True

    async def _on_insert(
        self, subscription: Subscription | None, notification: ChangeNotification
    ) -> None:
        if not self._is_current(subscription):
            return

        message_id = UUID(str(notification.record["id"]))
        if message_id in self._seen:
            return

        try:
            message = await self._api.get_message(message_id)
        except ClientError as e:
            logger.warning(
                "chat_message_fetch_failed",
                message_id=str(message_id),
                error_kind=e.kind.value,
            )
            return

        # Released, or delivered twice, while the row was being read
        if not self._is_current(subscription) or message.id in self._seen:
            return
        self._append(message)

    def _is_current(self, subscription: Subscription | None) -> bool:
        return (
            subscription is not None
            and subscription.active
            and subscription is self._subscription
        )

    def _append(self, message: MessageViewResponse) -> None:
        if message.id in self._seen:
            return
        self._seen.add(message.id)
        self.messages.append(message)
