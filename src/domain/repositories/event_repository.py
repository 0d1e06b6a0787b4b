"""Event repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.event import (
    AttendeeStatus,
    Event,
    EventAttendee,
    EventFilters,
)


class IEventRepository(Protocol):
    """Repository interface for Event and EventAttendee entities."""

    async def get(self, id: UUID) -> Event | None:
        """Get an event by ID."""
        ...

    async def search(self, filters: EventFilters) -> list[Event]:
        """List active public events ordered by start time."""
        ...

    async def create(self, event: Event) -> Event:
        """Create a new event."""
        ...

    async def update(self, event: Event) -> Event:
        """Update host-editable fields and status of an event."""
        ...

    async def try_increment_attendees(self, id: UUID) -> bool:
        """Atomically add one attendee if a seat is left.

        Returns False when the event is already at capacity.
        """
        ...

    async def decrement_attendees(self, id: UUID) -> None:
        """Atomically remove one attendee (never below zero)."""
        ...

    async def get_attendee(
        self, event_id: UUID, user_id: UUID
    ) -> EventAttendee | None:
        """Get a user's membership row for an event."""
        ...

    async def get_attendees(self, event_id: UUID) -> list[EventAttendee]:
        """Get all membership rows for an event with profile summaries."""
        ...

    async def add_attendee(self, attendee: EventAttendee) -> EventAttendee:
        """Insert a membership row.

        Raises AlreadyAttendingError on a (event_id, user_id) conflict.
        """
        ...

    async def update_attendee_status(
        self, event_id: UUID, user_id: UUID, status: AttendeeStatus
    ) -> EventAttendee:
        """Change the status of a membership row."""
        ...

    async def remove_attendee(
        self, event_id: UUID, user_id: UUID
    ) -> EventAttendee | None:
        """Delete a membership row, returning the removed row if any."""
        ...

    async def get_for_host(self, host_id: UUID) -> list[Event]:
        """Get all events hosted by a user."""
        ...
