"""SQLAlchemy implementation of Event repository."""

from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AlreadyAttendingError
from domain.entities.event import (
    AttendeeStatus,
    Event,
    EventAttendee,
    EventCategory,
    EventFilters,
    EventStatus,
)
from domain.entities.profile import ProfileSummary
from infrastructure.database.models import EventAttendeeModel, EventModel, ProfileModel


class SQLAlchemyEventRepository:
    """SQLAlchemy implementation of IEventRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Event | None:
        """Get an event by ID, bypassing stale identity-map counters."""
        stmt = (
            select(EventModel)
            .where(EventModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def search(self, filters: EventFilters) -> list[Event]:
        """List active public events ordered by start time."""
        stmt = select(EventModel).where(
            EventModel.status == EventStatus.ACTIVE.value,
            EventModel.is_public.is_(True),
        )

        if filters.category:
            stmt = stmt.where(EventModel.category == filters.category.value)
        if filters.campus_name:
            stmt = stmt.join(ProfileModel, ProfileModel.id == EventModel.host_id).where(
                func.lower(ProfileModel.campus_name) == filters.campus_name.lower()
            )
        if filters.starts_after:
            stmt = stmt.where(EventModel.start_time >= filters.starts_after)
        if filters.starts_before:
            stmt = stmt.where(EventModel.start_time < filters.starts_before)
        if filters.only_free:
            stmt = stmt.where(or_(EventModel.cost.is_(None), EventModel.cost == 0))

        stmt = (
            stmt.order_by(EventModel.start_time)
            .offset(filters.offset)
            .limit(filters.limit)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_for_host(self, host_id: UUID) -> list[Event]:
        """Get all events hosted by a user."""
        stmt = (
            select(EventModel)
            .where(EventModel.host_id == host_id)
            .order_by(EventModel.start_time)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, event: Event) -> Event:
        """Create a new event."""
        model = self._to_model(event)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, event: Event) -> Event:
        """Update host-editable fields and status.

        ``current_attendees`` is never written from the entity.
        """
        stmt = select(EventModel).where(EventModel.id == event.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Event {event.id} not found")

        model.title = event.title
        model.description = event.description
        model.category = event.category.value
        model.location_text = event.location_text
        model.latitude = event.latitude
        model.longitude = event.longitude
        model.start_time = event.start_time
        model.end_time = event.end_time
        model.max_attendees = event.max_attendees
        model.cover_url = event.cover_url
        model.tags = list(event.tags)
        model.cost = event.cost
        model.auto_approve = event.auto_approve
        model.is_public = event.is_public
        model.status = event.status.value

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def try_increment_attendees(self, id: UUID) -> bool:
        """Add one attendee only while a seat is left."""
        stmt = (
            update(EventModel)
            .where(
                EventModel.id == id,
                EventModel.current_attendees < EventModel.max_attendees,
            )
            .values(current_attendees=EventModel.current_attendees + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def decrement_attendees(self, id: UUID) -> None:
        """Remove one attendee, never going below zero."""
        stmt = (
            update(EventModel)
            .where(EventModel.id == id, EventModel.current_attendees > 0)
            .values(current_attendees=EventModel.current_attendees - 1)
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def get_attendee(
        self, event_id: UUID, user_id: UUID
    ) -> EventAttendee | None:
        """Get a user's membership row for an event."""
        stmt = select(EventAttendeeModel).where(
            EventAttendeeModel.event_id == event_id,
            EventAttendeeModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._attendee_to_entity(model) if model else None

    async def get_attendees(self, event_id: UUID) -> list[EventAttendee]:
        """Get all membership rows for an event, oldest first."""
        stmt = (
            select(EventAttendeeModel, ProfileModel.full_name, ProfileModel.avatar_url)
            .outerjoin(ProfileModel, ProfileModel.id == EventAttendeeModel.user_id)
            .where(EventAttendeeModel.event_id == event_id)
            .order_by(EventAttendeeModel.joined_at)
        )
        result = await self._session.execute(stmt)
        attendees = []
        for model, full_name, avatar_url in result.all():
            attendee = self._attendee_to_entity(model)
            attendee.profile = ProfileSummary(
                id=model.user_id,
                full_name=full_name or "",
                avatar_url=avatar_url,
            )
            attendees.append(attendee)
        return attendees

    async def add_attendee(self, attendee: EventAttendee) -> EventAttendee:
        """Insert a membership row."""
        model = self._attendee_to_model(attendee)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise AlreadyAttendingError(str(attendee.event_id)) from e
        await self._session.refresh(model)
        return self._attendee_to_entity(model)

    async def update_attendee_status(
        self, event_id: UUID, user_id: UUID, status: AttendeeStatus
    ) -> EventAttendee:
        """Change the status of a membership row."""
        stmt = select(EventAttendeeModel).where(
            EventAttendeeModel.event_id == event_id,
            EventAttendeeModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError("Event attendee not found")

        model.status = status.value
        await self._session.flush()
        return self._attendee_to_entity(model)

    async def remove_attendee(
        self, event_id: UUID, user_id: UUID
    ) -> EventAttendee | None:
        """Delete the (event_id, user_id) row only."""
        stmt = select(EventAttendeeModel).where(
            EventAttendeeModel.event_id == event_id,
            EventAttendeeModel.user_id == user_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            return None

        removed = self._attendee_to_entity(model)
        await self._session.delete(model)
        await self._session.flush()
        return removed

    def _to_entity(self, model: EventModel) -> Event:
        """Convert ORM model to domain entity."""
        return Event(
            id=model.id,
            host_id=model.host_id,
            title=model.title,
            description=model.description,
            category=EventCategory(model.category),
            location_text=model.location_text,
            latitude=model.latitude,
            longitude=model.longitude,
            start_time=model.start_time,
            end_time=model.end_time,
            max_attendees=model.max_attendees,
            current_attendees=model.current_attendees,
            cover_url=model.cover_url,
            tags=list(model.tags or []),
            cost=model.cost,
            auto_approve=model.auto_approve,
            is_public=model.is_public,
            status=EventStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Event) -> EventModel:
        """Convert domain entity to ORM model."""
        return EventModel(
            id=entity.id,
            host_id=entity.host_id,
            title=entity.title,
            description=entity.description,
            category=entity.category.value,
            location_text=entity.location_text,
            latitude=entity.latitude,
            longitude=entity.longitude,
            start_time=entity.start_time,
            end_time=entity.end_time,
            max_attendees=entity.max_attendees,
            current_attendees=entity.current_attendees,
            cover_url=entity.cover_url,
            tags=list(entity.tags),
            cost=entity.cost,
            auto_approve=entity.auto_approve,
            is_public=entity.is_public,
            status=entity.status.value,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _attendee_to_entity(self, model: EventAttendeeModel) -> EventAttendee:
        """Convert attendee ORM model to domain entity."""
        return EventAttendee(
            id=model.id,
            event_id=model.event_id,
            user_id=model.user_id,
            status=AttendeeStatus(model.status),
            notes=model.notes,
            joined_at=model.joined_at,
        )

    def _attendee_to_model(self, entity: EventAttendee) -> EventAttendeeModel:
        """Convert attendee domain entity to ORM model."""
        return EventAttendeeModel(
            id=entity.id,
            event_id=entity.event_id,
            user_id=entity.user_id,
            status=entity.status.value,
            notes=entity.notes,
            joined_at=entity.joined_at,
        )
