"""Thread and message domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

MAX_MESSAGE_LENGTH = 1000


class ThreadType(str, Enum):
    """Scope of a conversation."""

    EVENT = "event"
    CARPOOL = "carpool"
    DM = "dm"


class MessageType(str, Enum):
    """Kind of chat entry."""

    TEXT = "text"
    IMAGE = "image"
    LOCATION = "location"
    RSVP_STICKER = "rsvp_sticker"
    REACTION = "reaction"


@dataclass
class Thread:
    """Domain entity for an ordered conversation."""

    type: ThreadType
    id: UUID = field(default_factory=uuid4)
    event_id: UUID | None = None
    carpool_id: UUID | None = None
    last_message_at: datetime | None = None
    is_archived: bool = False
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class Message:
    """Domain entity for a single append-only chat entry."""

    thread_id: UUID
    sender_id: UUID
    content: str
    id: UUID = field(default_factory=uuid4)
    event_id: UUID | None = None
    message_type: MessageType = MessageType.TEXT
    reply_to_id: UUID | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass(frozen=True, slots=True)
class MessageView:
    """Read-only value object: message joined with its sender's display fields."""

    id: UUID
    thread_id: UUID
    event_id: UUID | None
    sender_id: UUID
    sender_name: str
    sender_avatar_url: str | None
    content: str
    message_type: MessageType
    reply_to_id: UUID | None
    created_at: datetime
