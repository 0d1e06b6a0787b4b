"""Unit tests for Chat service layer."""

from datetime import datetime
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    AppException,
    ErrorCode,
    EventNotFoundError,
    MessageNotFoundError,
    NotAParticipantError,
    ProfileNotFoundError,
    ThreadNotFoundError,
)
from domain.entities.event import AttendeeStatus, EventAttendee
from domain.entities.message import MessageType, MessageView, Thread, ThreadType
from domain.entities.profile import Profile
from domain.services.chat_service import MESSAGES_TABLE, ChatService, clean_content
from infrastructure.realtime.broker import ChangeNotification
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def broker() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def service(uow: FakeUnitOfWork, broker: AsyncMock) -> ChatService:
    return ChatService(lambda: uow, broker)


@pytest.fixture
def joined_member(uow: FakeUnitOfWork, make_event, event_thread: Thread, user_id: UUID):
    """An active event whose chat ``user_id`` has joined."""
    event = make_event(id=event_thread.event_id)
    uow.events.get.return_value = event
    uow.events.get_attendee.return_value = EventAttendee(
        event_id=event.id, user_id=user_id, status=AttendeeStatus.JOINED
    )
    uow.messages.get_event_thread.return_value = event_thread
    uow.messages.create_message.side_effect = lambda message: message
    return event


class TestCleanContent:
    def test_trims_whitespace(self) -> None:
        assert clean_content("  see you there \n") == "see you there"

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_rejects_blank(self, content: str) -> None:
        with pytest.raises(AppException) as exc_info:
            clean_content(content)

        assert exc_info.value.error_code == ErrorCode.VALIDATION_ERROR

    def test_rejects_overlong(self) -> None:
        with pytest.raises(AppException):
            clean_content("x" * 1001)

    def test_accepts_limit_after_trim(self) -> None:
        assert clean_content(" " + "x" * 1000 + " ") == "x" * 1000


class TestSendEventMessage:
    @pytest.mark.asyncio
    async def test_stores_trimmed_content_and_announces_after_commit(
        self,
        service: ChatService,
        uow: FakeUnitOfWork,
        broker: AsyncMock,
        joined_member,
        event_thread: Thread,
        user_id: UUID,
    ) -> None:
        committed_at_publish = []
        broker.publish.side_effect = lambda n: committed_at_publish.append(uow.committed)

        message = await service.send_event_message(joined_member.id, user_id, "  hi all  ")

        assert message.content == "hi all"
        assert message.thread_id == event_thread.id
        assert message.event_id == joined_member.id
        uow.messages.touch_thread.assert_awaited_once_with(event_thread.id)
        assert committed_at_publish == [True]

    @pytest.mark.asyncio
    async def test_notification_carries_keys_only(
        self,
        service: ChatService,
        broker: AsyncMock,
        joined_member,
        user_id: UUID,
    ) -> None:
        message = await service.send_event_message(joined_member.id, user_id, "hello")

        notification: ChangeNotification = broker.publish.await_args.args[0]
        assert notification.table == MESSAGES_TABLE
        assert notification.event_type == "INSERT"
        assert notification.record == {
            "id": str(message.id),
            "thread_id": str(message.thread_id),
            "event_id": str(joined_member.id),
        }

    @pytest.mark.asyncio
    async def test_blank_message_never_reaches_storage(
        self, service: ChatService, uow: FakeUnitOfWork, broker: AsyncMock, user_id: UUID
    ) -> None:
        with pytest.raises(AppException):
            await service.send_event_message(uuid4(), user_id, "   ")

        uow.messages.create_message.assert_not_called()
        broker.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_requester_cannot_post(
        self,
        service: ChatService,
        uow: FakeUnitOfWork,
        broker: AsyncMock,
        joined_member,
        user_id: UUID,
    ) -> None:
        uow.events.get_attendee.return_value = EventAttendee(
            event_id=joined_member.id, user_id=user_id, status=AttendeeStatus.REQUESTED
        )

        with pytest.raises(NotAParticipantError):
            await service.send_event_message(joined_member.id, user_id, "let me in")

        uow.messages.create_message.assert_not_called()
        broker.publish.assert_not_called()

    @pytest.mark.asyncio
    async def test_host_can_post_without_attendee_row(
        self,
        service: ChatService,
        uow: FakeUnitOfWork,
        joined_member,
        host_id: UUID,
    ) -> None:
        uow.events.get_attendee.return_value = None

        message = await service.send_event_message(joined_member.id, host_id, "welcome!")

        assert message.sender_id == host_id
        uow.events.get_attendee.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_event(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.events.get.return_value = None

        with pytest.raises(EventNotFoundError):
            await service.send_event_message(uuid4(), user_id, "hello?")


class TestReads:
    @pytest.mark.asyncio
    async def test_history_requires_membership(
        self, service: ChatService, uow: FakeUnitOfWork, joined_member, user_id: UUID
    ) -> None:
        uow.events.get_attendee.return_value = None

        with pytest.raises(NotAParticipantError):
            await service.list_event_messages(joined_member.id, user_id)

        uow.messages.get_event_messages.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_message_checks_thread_participation(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        view = MessageView(
            id=uuid4(),
            thread_id=uuid4(),
            event_id=None,
            sender_id=uuid4(),
            sender_name="Grace",
            sender_avatar_url=None,
            content="hey",
            message_type=MessageType.TEXT,
            reply_to_id=None,
            created_at=datetime.utcnow(),
        )
        uow.messages.get_message_view.return_value = view
        uow.messages.is_participant.return_value = False

        with pytest.raises(NotAParticipantError):
            await service.get_message(view.id, user_id)

        uow.messages.is_participant.return_value = True
        assert await service.get_message(view.id, user_id) == view

    @pytest.mark.asyncio
    async def test_get_missing_message(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.messages.get_message_view.return_value = None

        with pytest.raises(MessageNotFoundError):
            await service.get_message(uuid4(), user_id)


class TestDirectThreads:
    @pytest.mark.asyncio
    async def test_reuses_existing_thread(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        other_id = uuid4()
        existing = Thread(type=ThreadType.DM)
        uow.profiles.get.return_value = Profile(id=other_id, full_name="Grace")
        uow.messages.get_direct_thread.return_value = existing

        result = await service.open_direct_thread(user_id, other_id)

        assert result == existing
        uow.messages.create_thread.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_thread_with_both_participants(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        other_id = uuid4()
        uow.profiles.get.return_value = Profile(id=other_id, full_name="Grace")
        uow.messages.get_direct_thread.return_value = None
        uow.messages.create_thread.side_effect = lambda thread, participant_ids: thread

        result = await service.open_direct_thread(user_id, other_id)

        assert result.type == ThreadType.DM
        _, kwargs = uow.messages.create_thread.call_args
        assert kwargs["participant_ids"] == [user_id, other_id]
        assert uow.committed

    @pytest.mark.asyncio
    async def test_cannot_message_yourself(self, service: ChatService, user_id: UUID) -> None:
        with pytest.raises(AppException):
            await service.open_direct_thread(user_id, user_id)

    @pytest.mark.asyncio
    async def test_unknown_recipient(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.profiles.get.return_value = None

        with pytest.raises(ProfileNotFoundError):
            await service.open_direct_thread(user_id, uuid4())

    @pytest.mark.asyncio
    async def test_thread_send_requires_participation(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.messages.get_thread.return_value = Thread(type=ThreadType.DM)
        uow.messages.is_participant.return_value = False

        with pytest.raises(NotAParticipantError):
            await service.send_thread_message(uuid4(), user_id, "hi")

    @pytest.mark.asyncio
    async def test_thread_send_unknown_thread(
        self, service: ChatService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        uow.messages.get_thread.return_value = None

        with pytest.raises(ThreadNotFoundError):
            await service.send_thread_message(uuid4(), user_id, "hi")
