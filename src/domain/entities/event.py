"""Event and attendance domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4

from domain.entities.profile import ProfileSummary


class EventCategory(str, Enum):
    """Kind of activity an event is."""

    STUDY = "study"
    SPORT = "sport"
    PARTY = "party"
    FOOD = "food"
    VOLUNTEER = "volunteer"
    SOCIAL = "social"
    ACADEMIC = "academic"
    FITNESS = "fitness"
    MUSIC = "music"
    TECH = "tech"
    OTHER = "other"


class EventStatus(str, Enum):
    """Event lifecycle state."""

    DRAFT = "draft"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


# Terminal states have no outgoing transitions.
_TRANSITIONS: dict[EventStatus, frozenset[EventStatus]] = {
    EventStatus.DRAFT: frozenset({EventStatus.ACTIVE, EventStatus.CANCELLED}),
    EventStatus.ACTIVE: frozenset({EventStatus.CANCELLED, EventStatus.COMPLETED}),
    EventStatus.CANCELLED: frozenset(),
    EventStatus.COMPLETED: frozenset(),
}


def can_transition(current: EventStatus, target: EventStatus) -> bool:
    """Check whether an event may move from ``current`` to ``target``."""
    return target in _TRANSITIONS[current]


class AttendeeStatus(str, Enum):
    """Status of a user's membership row for an event."""

    JOINED = "joined"
    REQUESTED = "requested"
    DENIED = "denied"
    WAITLISTED = "waitlisted"


@dataclass
class Event:
    """Domain entity for a hosted campus event."""

    host_id: UUID
    title: str
    category: EventCategory
    location_text: str
    start_time: datetime
    end_time: datetime
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    max_attendees: int = 20
    current_attendees: int = 0
    cover_url: str | None = None
    tags: list[str] = field(default_factory=list)
    cost: int | None = None
    auto_approve: bool = True
    is_public: bool = True
    status: EventStatus = EventStatus.ACTIVE
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def is_full(self) -> bool:
        return self.current_attendees >= self.max_attendees


@dataclass
class EventAttendee:
    """Domain entity linking a profile to an event."""

    event_id: UUID
    user_id: UUID
    id: UUID = field(default_factory=uuid4)
    status: AttendeeStatus = AttendeeStatus.JOINED
    notes: str | None = None
    joined_at: datetime = field(default_factory=datetime.utcnow)
    profile: ProfileSummary | None = None


@dataclass
class EventFilters:
    """Listing filters for the discover feed."""

    category: EventCategory | None = None
    campus_name: str | None = None
    starts_after: datetime | None = None
    starts_before: datetime | None = None
    only_free: bool = False
    limit: int = 20
    offset: int = 0
