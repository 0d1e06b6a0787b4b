"""Rating repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.rating import Rating


class IRatingRepository(Protocol):
    """Repository interface for Rating entities."""

    async def create(self, rating: Rating) -> Rating:
        """Insert a rating.

        Raises DuplicateRatingError on an (event, rater, ratee) conflict.
        """
        ...

    async def get_for_ratee(self, ratee_id: UUID) -> list[Rating]:
        """Get ratings received by a user, newest first."""
        ...
