"""Thread and message repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.message import Message, MessageView, Thread


class IMessageRepository(Protocol):
    """Repository interface for Thread and Message entities."""

    async def get_thread(self, id: UUID) -> Thread | None:
        """Get a thread by ID."""
        ...

    async def get_event_thread(self, event_id: UUID) -> Thread | None:
        """Get the conversation scoped to an event."""
        ...

    async def get_carpool_thread(self, carpool_id: UUID) -> Thread | None:
        """Get the conversation scoped to a carpool."""
        ...

    async def get_direct_thread(self, user_a: UUID, user_b: UUID) -> Thread | None:
        """Get the direct thread between two users, if one exists."""
        ...

    async def create_thread(self, thread: Thread, participant_ids: list[UUID]) -> Thread:
        """Create a thread with its initial participants."""
        ...

    async def touch_thread(self, id: UUID) -> None:
        """Set last_message_at to now."""
        ...

    async def is_participant(self, thread_id: UUID, user_id: UUID) -> bool:
        """Check thread participation."""
        ...

    async def add_participant(self, thread_id: UUID, user_id: UUID) -> None:
        """Add a participant (no-op if present)."""
        ...

    async def remove_participant(self, thread_id: UUID, user_id: UUID) -> None:
        """Remove a participant (no-op if absent)."""
        ...

    async def get_threads_for_user(self, user_id: UUID) -> list[Thread]:
        """Get a user's non-archived threads, most recent activity first."""
        ...

    async def create_message(self, message: Message) -> Message:
        """Append a message."""
        ...

    async def get_message_view(self, id: UUID) -> MessageView | None:
        """Get one message joined with sender display fields."""
        ...

    async def get_thread_messages(self, thread_id: UUID) -> list[MessageView]:
        """Get a thread's messages in creation order."""
        ...

    async def get_event_messages(self, event_id: UUID) -> list[MessageView]:
        """Get an event's chat messages in creation order."""
        ...
