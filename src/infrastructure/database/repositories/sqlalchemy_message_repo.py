"""SQLAlchemy implementation of Thread/Message repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from domain.entities.message import (
    Message,
    MessageType,
    MessageView,
    Thread,
    ThreadType,
)
from infrastructure.database.models import (
    MessageModel,
    ProfileModel,
    ThreadModel,
    ThreadParticipantModel,
)


class SQLAlchemyMessageRepository:
    """SQLAlchemy implementation of IMessageRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_thread(self, id: UUID) -> Thread | None:
        """Get a thread by ID."""
        stmt = select(ThreadModel).where(ThreadModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._thread_to_entity(model) if model else None

    async def get_event_thread(self, event_id: UUID) -> Thread | None:
        """Get the conversation scoped to an event."""
        stmt = select(ThreadModel).where(ThreadModel.event_id == event_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._thread_to_entity(model) if model else None

    async def get_carpool_thread(self, carpool_id: UUID) -> Thread | None:
        """Get the conversation scoped to a carpool."""
        stmt = select(ThreadModel).where(ThreadModel.carpool_id == carpool_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._thread_to_entity(model) if model else None

    async def get_direct_thread(self, user_a: UUID, user_b: UUID) -> Thread | None:
        """Get the direct thread shared by exactly these two users."""
        shared = (
            select(ThreadParticipantModel.thread_id)
            .where(ThreadParticipantModel.user_id.in_([user_a, user_b]))
            .group_by(ThreadParticipantModel.thread_id)
            .having(func.count() == 2)
        )
        stmt = (
            select(ThreadModel)
            .where(
                ThreadModel.type == ThreadType.DM.value,
                ThreadModel.id.in_(shared),
            )
            .limit(1)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._thread_to_entity(model) if model else None

    async def create_thread(self, thread: Thread, participant_ids: list[UUID]) -> Thread:
        """Create a thread with its initial participants."""
        model = self._thread_to_model(thread)
        self._session.add(model)
        for user_id in dict.fromkeys(participant_ids):
            self._session.add(
                ThreadParticipantModel(thread_id=thread.id, user_id=user_id)
            )
        await self._session.flush()
        await self._session.refresh(model)
        return self._thread_to_entity(model)

    async def touch_thread(self, id: UUID) -> None:
        """Set last_message_at to now."""
        stmt = (
            update(ThreadModel)
            .where(ThreadModel.id == id)
            .values(last_message_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def is_participant(self, thread_id: UUID, user_id: UUID) -> bool:
        """Check thread participation."""
        stmt = select(ThreadParticipantModel).where(
            ThreadParticipantModel.thread_id == thread_id,
            ThreadParticipantModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def add_participant(self, thread_id: UUID, user_id: UUID) -> None:
        """Add a participant (no-op if present)."""
        if await self.is_participant(thread_id, user_id):
            return
        self._session.add(ThreadParticipantModel(thread_id=thread_id, user_id=user_id))
        await self._session.flush()

    async def remove_participant(self, thread_id: UUID, user_id: UUID) -> None:
        """Remove a participant (no-op if absent)."""
        stmt = delete(ThreadParticipantModel).where(
            ThreadParticipantModel.thread_id == thread_id,
            ThreadParticipantModel.user_id == user_id,
        )
        await self._session.execute(stmt)

    async def get_threads_for_user(self, user_id: UUID) -> list[Thread]:
        """Get a user's non-archived threads, most recent activity first."""
        stmt = (
            select(ThreadModel)
            .join(
                ThreadParticipantModel,
                ThreadParticipantModel.thread_id == ThreadModel.id,
            )
            .where(
                ThreadParticipantModel.user_id == user_id,
                ThreadModel.is_archived.is_(False),
            )
            .order_by(
                func.coalesce(ThreadModel.last_message_at, ThreadModel.created_at).desc()
            )
        )
        result = await self._session.execute(stmt)
        return [self._thread_to_entity(model) for model in result.scalars()]

    async def create_message(self, message: Message) -> Message:
        """Append a message."""
        model = self._message_to_model(message)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._message_to_entity(model)

    async def get_message_view(self, id: UUID) -> MessageView | None:
        """Get one message joined with sender display fields."""
        stmt = self._view_query().where(MessageModel.id == id)
        result = await self._session.execute(stmt)
        row = result.one_or_none()
        return self._row_to_view(*row) if row else None

    async def get_thread_messages(self, thread_id: UUID) -> list[MessageView]:
        """Get a thread's messages in creation order."""
        stmt = (
            self._view_query()
            .where(MessageModel.thread_id == thread_id)
            .order_by(MessageModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [self._row_to_view(*row) for row in result.all()]

    async def get_event_messages(self, event_id: UUID) -> list[MessageView]:
        """Get an event's chat messages in creation order."""
        stmt = (
            self._view_query()
            .where(MessageModel.event_id == event_id)
            .order_by(MessageModel.created_at.asc())
        )
        result = await self._session.execute(stmt)
        return [self._row_to_view(*row) for row in result.all()]

    def _view_query(self):
        return select(
            MessageModel, ProfileModel.full_name, ProfileModel.avatar_url
        ).outerjoin(ProfileModel, ProfileModel.id == MessageModel.sender_id)

    def _row_to_view(
        self, model: MessageModel, full_name: str | None, avatar_url: str | None
    ) -> MessageView:
        """Build a read-only view from a joined row."""
        return MessageView(
            id=model.id,
            thread_id=model.thread_id,
            event_id=model.event_id,
            sender_id=model.sender_id,
            sender_name=full_name or "",
            sender_avatar_url=avatar_url,
            content=model.content,
            message_type=MessageType(model.message_type),
            reply_to_id=model.reply_to_id,
            created_at=model.created_at,
        )

    def _thread_to_entity(self, model: ThreadModel) -> Thread:
        """Convert thread ORM model to domain entity."""
        return Thread(
            id=model.id,
            type=ThreadType(model.type),
            event_id=model.event_id,
            carpool_id=model.carpool_id,
            last_message_at=model.last_message_at,
            is_archived=model.is_archived,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _thread_to_model(self, entity: Thread) -> ThreadModel:
        """Convert thread domain entity to ORM model."""
        return ThreadModel(
            id=entity.id,
            type=entity.type.value,
            event_id=entity.event_id,
            carpool_id=entity.carpool_id,
            last_message_at=entity.last_message_at,
            is_archived=entity.is_archived,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _message_to_entity(self, model: MessageModel) -> Message:
        """Convert message ORM model to domain entity."""
        return Message(
            id=model.id,
            thread_id=model.thread_id,
            event_id=model.event_id,
            sender_id=model.sender_id,
            content=model.content,
            message_type=MessageType(model.message_type),
            reply_to_id=model.reply_to_id,
            created_at=model.created_at,
        )

    def _message_to_model(self, entity: Message) -> MessageModel:
        """Convert message domain entity to ORM model."""
        return MessageModel(
            id=entity.id,
            thread_id=entity.thread_id,
            event_id=entity.event_id,
            sender_id=entity.sender_id,
            content=entity.content,
            message_type=entity.message_type.value,
            reply_to_id=entity.reply_to_id,
            created_at=entity.created_at,
        )
