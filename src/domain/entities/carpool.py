"""Carpool domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import UUID, uuid4


class CarpoolStatus(str, Enum):
    """Carpool offer state."""

    ACTIVE = "active"
    FULL = "full"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class CarpoolRequestStatus(str, Enum):
    """Seat request state."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DENIED = "denied"
    CANCELLED = "cancelled"


@dataclass
class Carpool:
    """Domain entity for a ride offer tied to an event."""

    event_id: UUID
    driver_id: UUID
    origin_text: str
    destination_text: str
    depart_time: datetime
    seats_total: int
    id: UUID = field(default_factory=uuid4)
    seats_available: int = -1
    depart_window: int = 15
    cost_per_person: int | None = None
    meeting_spot: str | None = None
    vehicle_info: str | None = None
    safety_notes: str | None = None
    status: CarpoolStatus = CarpoolStatus.ACTIVE
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self) -> None:
        """A new offer starts with every seat available."""
        if self.seats_available < 0:
            self.seats_available = self.seats_total


@dataclass
class CarpoolRequest:
    """Domain entity for a rider asking for seats."""

    carpool_id: UUID
    rider_id: UUID
    id: UUID = field(default_factory=uuid4)
    seats_requested: int = 1
    pickup_location: str | None = None
    message: str | None = None
    status: CarpoolRequestStatus = CarpoolRequestStatus.PENDING
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)
