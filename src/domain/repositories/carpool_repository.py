"""Carpool repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.carpool import Carpool, CarpoolRequest, CarpoolRequestStatus


class ICarpoolRepository(Protocol):
    """Repository interface for Carpool and CarpoolRequest entities."""

    async def get(self, id: UUID) -> Carpool | None:
        """Get a carpool by ID."""
        ...

    async def get_for_event(self, event_id: UUID) -> list[Carpool]:
        """Get all carpools offered for an event."""
        ...

    async def create(self, carpool: Carpool) -> Carpool:
        """Create a new carpool."""
        ...

    async def update(self, carpool: Carpool) -> Carpool:
        """Update a carpool's status."""
        ...

    async def try_reserve_seats(self, id: UUID, seats: int) -> bool:
        """Atomically take seats if enough are left.

        Returns False when fewer than ``seats`` remain.
        """
        ...

    async def get_request(self, request_id: UUID) -> CarpoolRequest | None:
        """Get a seat request by ID."""
        ...

    async def get_requests(self, carpool_id: UUID) -> list[CarpoolRequest]:
        """Get all seat requests for a carpool."""
        ...

    async def add_request(self, request: CarpoolRequest) -> CarpoolRequest:
        """Insert a seat request.

        Raises AlreadyRequestedSeatError on a (carpool_id, rider_id) conflict.
        """
        ...

    async def update_request_status(
        self, request_id: UUID, status: CarpoolRequestStatus
    ) -> CarpoolRequest:
        """Change the status of a seat request."""
        ...
