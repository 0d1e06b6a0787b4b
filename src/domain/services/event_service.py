"""Event service layer."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import (
    AppException,
    AuthorizationError,
    ErrorCode,
    EventNotFoundError,
    InvalidStateTransitionError,
    ProfileNotFoundError,
)
from domain.entities.event import Event, EventFilters, EventStatus, can_transition
from domain.entities.message import Thread, ThreadType
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

EDITABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "category",
        "location_text",
        "latitude",
        "longitude",
        "start_time",
        "end_time",
        "max_attendees",
        "cover_url",
        "tags",
        "cost",
        "auto_approve",
        "is_public",
    }
)


class EventService:
    """Service layer for Event business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def search(self, filters: EventFilters) -> list[Event]:
        """List joinable events for the discover feed."""
        async with self._uow_factory() as uow:
            return await uow.events.search(filters)

    async def get(self, event_id: UUID) -> Event:
        """Get an event by ID."""
        async with self._uow_factory() as uow:
            event = await uow.events.get(event_id)
            if not event:
                raise EventNotFoundError(str(event_id))
            return event

    async def get_hosted(self, host_id: UUID) -> list[Event]:
        """Get the events a user hosts."""
        async with self._uow_factory() as uow:
            return await uow.events.get_for_host(host_id)

    async def create(self, host_id: UUID, **fields: Any) -> Event:
        """Create an event and its chat thread.

        The host is the thread's first participant. The host does not
        occupy an attendee seat.
        """
        async with self._uow_factory() as uow:
            if not await uow.profiles.get(host_id):
                raise ProfileNotFoundError(str(host_id))

            event = Event(
                host_id=host_id,
                **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS | {"status"}},
            )
            created = await uow.events.create(event)
            await uow.messages.create_thread(
                Thread(type=ThreadType.EVENT, event_id=created.id),
                participant_ids=[host_id],
            )
            await uow.commit()

            logger.info(
                "event_created",
                event_id=str(created.id),
                host_id=str(host_id),
                category=created.category.value,
            )
            return created

    async def update(
        self, event_id: UUID, user_id: UUID, changes: dict[str, Any]
    ) -> Event:
        """Apply host edits to an event."""
        async with self._uow_factory() as uow:
            event = await self._require_host(uow, event_id, user_id)

            if event.status in (EventStatus.CANCELLED, EventStatus.COMPLETED):
                raise AppException(
                    ErrorCode.VALIDATION_ERROR,
                    "Finished events cannot be edited",
                    400,
                )

            allowed = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
            if not allowed:
                return event

            candidate = replace(event, **allowed, updated_at=datetime.utcnow())

            if candidate.end_time <= candidate.start_time:
                raise AppException(
                    ErrorCode.VALIDATION_ERROR,
                    "end_time must be after start_time",
                    400,
                )
            if candidate.max_attendees < event.current_attendees:
                raise AppException(
                    ErrorCode.VALIDATION_ERROR,
                    "max_attendees cannot be lower than the current attendee count",
                    400,
                    details={"current_attendees": event.current_attendees},
                )

            updated = await uow.events.update(candidate)
            await uow.commit()

            logger.info(
                "event_updated",
                event_id=str(event_id),
                fields=sorted(allowed),
            )
            return updated

    async def change_status(
        self, event_id: UUID, user_id: UUID, target: EventStatus
    ) -> Event:
        """Move an event along its lifecycle (host only)."""
        async with self._uow_factory() as uow:
            event = await self._require_host(uow, event_id, user_id)

            if not can_transition(event.status, target):
                raise InvalidStateTransitionError(event.status.value, target.value)

            updated = await uow.events.update(
                replace(event, status=target, updated_at=datetime.utcnow())
            )
            await uow.commit()

            logger.info(
                "event_status_changed",
                event_id=str(event_id),
                from_status=event.status.value,
                to_status=target.value,
            )
            return updated

    async def cancel(self, event_id: UUID, user_id: UUID) -> Event:
        return await self.change_status(event_id, user_id, EventStatus.CANCELLED)

    async def complete(self, event_id: UUID, user_id: UUID) -> Event:
        return await self.change_status(event_id, user_id, EventStatus.COMPLETED)

    async def _require_host(
        self, uow: IUnitOfWork, event_id: UUID, user_id: UUID
    ) -> Event:
        event = await uow.events.get(event_id)
        if not event:
            raise EventNotFoundError(str(event_id))
        if event.host_id != user_id:
            raise AuthorizationError("Only the host can manage this event")
        return event
