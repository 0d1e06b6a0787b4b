"""Event membership (join/leave/review) service layer.

The attendee counter is only moved by the repository's guarded UPDATE,
issued in the same transaction as the membership row it accounts for.
The capacity pre-check here is advisory; the storage layer decides.
"""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    AlreadyAttendingError,
    AttendeeNotFoundError,
    AuthorizationError,
    EventFullError,
    EventNotFoundError,
    EventNotJoinableError,
    InvalidStateTransitionError,
)
from domain.entities.event import AttendeeStatus, Event, EventAttendee, EventStatus
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class MembershipService:
    """Service layer for joining and leaving events."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def join(
        self, event_id: UUID, user_id: UUID, notes: str | None = None
    ) -> EventAttendee:
        """Join an event, or request to join when it needs host approval.

        Raises:
            EventNotFoundError: No such event.
            EventNotJoinableError: Event is not active.
            AlreadyAttendingError: Caller already has a row for this event.
            EventFullError: No seat left.
        """
        async with self._uow_factory() as uow:
            event = await self._get_event(uow, event_id)

            if event.status != EventStatus.ACTIVE:
                raise EventNotJoinableError(str(event_id), event.status.value)

            if await uow.events.get_attendee(event_id, user_id):
                raise AlreadyAttendingError(str(event_id))

            if event.is_full:
                raise EventFullError(str(event_id))

            status = (
                AttendeeStatus.JOINED if event.auto_approve else AttendeeStatus.REQUESTED
            )
            attendee = await uow.events.add_attendee(
                EventAttendee(
                    event_id=event_id,
                    user_id=user_id,
                    status=status,
                    notes=notes,
                )
            )

            if status == AttendeeStatus.JOINED:
                await self._take_seat(uow, event_id, user_id)

            await uow.commit()

            logger.info(
                "event_joined" if status == AttendeeStatus.JOINED else "event_join_requested",
                event_id=str(event_id),
                user_id=str(user_id),
            )
            return attendee

    async def leave(self, event_id: UUID, user_id: UUID) -> None:
        """Remove the caller's own row. No-op when there is none."""
        async with self._uow_factory() as uow:
            removed = await uow.events.remove_attendee(event_id, user_id)
            if removed is None:
                return

            if removed.status == AttendeeStatus.JOINED:
                await uow.events.decrement_attendees(event_id)
                thread = await uow.messages.get_event_thread(event_id)
                if thread:
                    await uow.messages.remove_participant(thread.id, user_id)

            await uow.commit()

            logger.info(
                "event_left",
                event_id=str(event_id),
                user_id=str(user_id),
                was_joined=removed.status == AttendeeStatus.JOINED,
            )

    async def list_attendees(self, event_id: UUID) -> list[EventAttendee]:
        """Get an event's membership rows with display fields."""
        async with self._uow_factory() as uow:
            await self._get_event(uow, event_id)
            return await uow.events.get_attendees(event_id)

    async def approve(
        self, event_id: UUID, host_id: UUID, user_id: UUID
    ) -> EventAttendee:
        """Admit a requested or waitlisted user (host only)."""
        async with self._uow_factory() as uow:
            event = await self._require_host(uow, event_id, host_id)
            attendee = await self._get_attendee(uow, event_id, user_id)

            if attendee.status not in (AttendeeStatus.REQUESTED, AttendeeStatus.WAITLISTED):
                raise InvalidStateTransitionError(
                    attendee.status.value, AttendeeStatus.JOINED.value
                )
            if event.status != EventStatus.ACTIVE:
                raise EventNotJoinableError(str(event_id), event.status.value)

            await self._take_seat(uow, event_id, user_id)
            updated = await uow.events.update_attendee_status(
                event_id, user_id, AttendeeStatus.JOINED
            )
            await uow.commit()

            logger.info(
                "event_join_approved",
                event_id=str(event_id),
                user_id=str(user_id),
            )
            return updated

    async def deny(
        self, event_id: UUID, host_id: UUID, user_id: UUID
    ) -> EventAttendee:
        """Turn down a pending request (host only)."""
        async with self._uow_factory() as uow:
            await self._require_host(uow, event_id, host_id)
            attendee = await self._get_attendee(uow, event_id, user_id)

            if attendee.status not in (AttendeeStatus.REQUESTED, AttendeeStatus.WAITLISTED):
                raise InvalidStateTransitionError(
                    attendee.status.value, AttendeeStatus.DENIED.value
                )

            updated = await uow.events.update_attendee_status(
                event_id, user_id, AttendeeStatus.DENIED
            )
            await uow.commit()

            logger.info(
                "event_join_denied",
                event_id=str(event_id),
                user_id=str(user_id),
            )
            return updated

    async def _take_seat(self, uow: IUnitOfWork, event_id: UUID, user_id: UUID) -> None:
        """Claim a seat and add the attendee to the event chat thread.

        Raises EventFullError when the guarded increment matched no row; the
        caller's unit of work then rolls back the pending insert.
        """
        if not await uow.events.try_increment_attendees(event_id):
            logger.info("event_full_on_increment", event_id=str(event_id))
            raise EventFullError(str(event_id))

        thread = await uow.messages.get_event_thread(event_id)
        if thread:
            await uow.messages.add_participant(thread.id, user_id)

    async def _get_event(self, uow: IUnitOfWork, event_id: UUID) -> Event:
        event = await uow.events.get(event_id)
        if not event:
            raise EventNotFoundError(str(event_id))
        return event

    async def _require_host(
        self, uow: IUnitOfWork, event_id: UUID, host_id: UUID
    ) -> Event:
        event = await self._get_event(uow, event_id)
        if event.host_id != host_id:
            raise AuthorizationError("Only the host can review attendees")
        return event

    async def _get_attendee(
        self, uow: IUnitOfWork, event_id: UUID, user_id: UUID
    ) -> EventAttendee:
        attendee = await uow.events.get_attendee(event_id, user_id)
        if not attendee:
            raise AttendeeNotFoundError(str(user_id))
        return attendee
