"""Chat service layer: event, carpool and direct threads."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    AppException,
    ErrorCode,
    EventNotFoundError,
    MessageNotFoundError,
    NotAParticipantError,
    ProfileNotFoundError,
    ThreadNotFoundError,
)
from domain.entities.event import AttendeeStatus
from domain.entities.message import (
    MAX_MESSAGE_LENGTH,
    Message,
    MessageType,
    MessageView,
    Thread,
    ThreadType,
)
from domain.repositories.unit_of_work import IUnitOfWork
from infrastructure.realtime.broker import ChangeNotification, IRealtimeBroker

logger = structlog.get_logger()

MESSAGES_TABLE = "messages"


def clean_content(content: str) -> str:
    """Trim a message body and check its length."""
    trimmed = content.strip()
    if not trimmed:
        raise AppException(ErrorCode.VALIDATION_ERROR, "Message cannot be empty", 400)
    if len(trimmed) > MAX_MESSAGE_LENGTH:
        raise AppException(
            ErrorCode.VALIDATION_ERROR,
            f"Message cannot exceed {MAX_MESSAGE_LENGTH} characters",
            400,
        )
    return trimmed


class ChatService:
    """Service layer for threads and messages.

    Inserts are announced on the realtime broker only after commit, with a
    record holding just the primary key and the filter columns.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        broker: IRealtimeBroker,
    ) -> None:
        self._uow_factory = uow_factory
        self._broker = broker

    # --- Event chat ---

    async def list_event_messages(self, event_id: UUID, user_id: UUID) -> list[MessageView]:
        """An event's chat history in creation order."""
        async with self._uow_factory() as uow:
            await self._require_event_member(uow, event_id, user_id)
            return await uow.messages.get_event_messages(event_id)

    async def authorize_event_chat(self, event_id: UUID, user_id: UUID) -> Thread:
        """Check that a user may follow an event's chat."""
        async with self._uow_factory() as uow:
            return await self._require_event_member(uow, event_id, user_id)

    async def get_message(self, message_id: UUID, user_id: UUID) -> MessageView:
        """One message with its sender's display fields."""
        async with self._uow_factory() as uow:
            view = await uow.messages.get_message_view(message_id)
            if not view:
                raise MessageNotFoundError(str(message_id))
            if not await uow.messages.is_participant(view.thread_id, user_id):
                raise NotAParticipantError(str(view.thread_id))
            return view

    async def send_event_message(
        self,
        event_id: UUID,
        sender_id: UUID,
        content: str,
        message_type: MessageType = MessageType.TEXT,
        reply_to_id: UUID | None = None,
    ) -> Message:
        """Post to an event's chat. Only the host and joined attendees may post."""
        body = clean_content(content)

        async with self._uow_factory() as uow:
            thread = await self._require_event_member(uow, event_id, sender_id)
            message = await uow.messages.create_message(
                Message(
                    thread_id=thread.id,
                    event_id=event_id,
                    sender_id=sender_id,
                    content=body,
                    message_type=message_type,
                    reply_to_id=reply_to_id,
                )
            )
            await uow.messages.touch_thread(thread.id)
            await uow.commit()

        logger.info(
            "message_sent",
            message_id=str(message.id),
            thread_id=str(message.thread_id),
            event_id=str(event_id),
        )
        await self._announce(message)
        return message

    # --- Generic threads ---

    async def get_inbox(self, user_id: UUID) -> list[Thread]:
        """A user's threads, most recent activity first."""
        async with self._uow_factory() as uow:
            return await uow.messages.get_threads_for_user(user_id)

    async def open_direct_thread(self, user_id: UUID, other_id: UUID) -> Thread:
        """Get or create the direct thread between two users."""
        if user_id == other_id:
            raise AppException(
                ErrorCode.VALIDATION_ERROR, "Cannot open a conversation with yourself", 400
            )

        async with self._uow_factory() as uow:
            if not await uow.profiles.get(other_id):
                raise ProfileNotFoundError(str(other_id))

            existing = await uow.messages.get_direct_thread(user_id, other_id)
            if existing:
                return existing

            thread = await uow.messages.create_thread(
                Thread(type=ThreadType.DM), participant_ids=[user_id, other_id]
            )
            await uow.commit()

            logger.info("direct_thread_opened", thread_id=str(thread.id))
            return thread

    async def list_thread_messages(self, thread_id: UUID, user_id: UUID) -> list[MessageView]:
        async with self._uow_factory() as uow:
            await self._require_participant(uow, thread_id, user_id)
            return await uow.messages.get_thread_messages(thread_id)

    async def send_thread_message(
        self,
        thread_id: UUID,
        sender_id: UUID,
        content: str,
        message_type: MessageType = MessageType.TEXT,
        reply_to_id: UUID | None = None,
    ) -> Message:
        """Post to any thread the sender participates in."""
        body = clean_content(content)

        async with self._uow_factory() as uow:
            thread = await self._require_participant(uow, thread_id, sender_id)
            message = await uow.messages.create_message(
                Message(
                    thread_id=thread.id,
                    event_id=thread.event_id,
                    sender_id=sender_id,
                    content=body,
                    message_type=message_type,
                    reply_to_id=reply_to_id,
                )
            )
            await uow.messages.touch_thread(thread.id)
            await uow.commit()

        logger.info(
            "message_sent",
            message_id=str(message.id),
            thread_id=str(thread_id),
        )
        await self._announce(message)
        return message

    async def _announce(self, message: Message) -> None:
        record = {"id": str(message.id), "thread_id": str(message.thread_id)}
        if message.event_id:
            record["event_id"] = str(message.event_id)
        await self._broker.publish(ChangeNotification(table=MESSAGES_TABLE, record=record))

    async def _require_participant(
        self, uow: IUnitOfWork, thread_id: UUID, user_id: UUID
    ) -> Thread:
        thread = await uow.messages.get_thread(thread_id)
        if not thread:
            raise ThreadNotFoundError(str(thread_id))
        if not await uow.messages.is_participant(thread_id, user_id):
            raise NotAParticipantError(str(thread_id))
        return thread

    async def _require_event_member(
        self, uow: IUnitOfWork, event_id: UUID, user_id: UUID
    ) -> Thread:
        """Resolve the event thread for its host or a joined attendee."""
        event = await uow.events.get(event_id)
        if not event:
            raise EventNotFoundError(str(event_id))

        thread = await uow.messages.get_event_thread(event_id)
        if not thread:
            raise ThreadNotFoundError(str(event_id))

        if event.host_id != user_id:
            attendee = await uow.events.get_attendee(event_id, user_id)
            if not attendee or attendee.status != AttendeeStatus.JOINED:
                raise NotAParticipantError(str(thread.id))
        return thread
