"""Rating service layer."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    EventNotFoundError,
    InvalidRatingError,
    ProfileNotFoundError,
)
from domain.entities.event import AttendeeStatus, Event
from domain.entities.rating import QuickTag, Rating
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class RatingService:
    """Service layer for post-event ratings."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def create(
        self,
        event_id: UUID,
        rater_id: UUID,
        ratee_id: UUID,
        stars: int,
        quick_tags: list[QuickTag] | None = None,
        comment: str | None = None,
        is_anonymous: bool = False,
    ) -> Rating:
        """Rate someone you shared an event with.

        Both users must be the host or a joined attendee. The score is
        folded into the ratee's rolling average in the same transaction.
        """
        if rater_id == ratee_id:
            raise InvalidRatingError("You cannot rate yourself")

        async with self._uow_factory() as uow:
            event = await uow.events.get(event_id)
            if not event:
                raise EventNotFoundError(str(event_id))
            if not await uow.profiles.get(ratee_id):
                raise ProfileNotFoundError(str(ratee_id))

            if not await self._took_part(uow, event, rater_id):
                raise InvalidRatingError("Only people who attended can leave ratings")
            if not await self._took_part(uow, event, ratee_id):
                raise InvalidRatingError("That user did not attend this event")

            rating = await uow.ratings.create(
                Rating(
                    event_id=event_id,
                    rater_id=rater_id,
                    ratee_id=ratee_id,
                    stars=stars,
                    quick_tags=list(quick_tags or []),
                    comment=comment,
                    is_anonymous=is_anonymous,
                )
            )
            await uow.profiles.apply_rating(ratee_id, stars)
            await uow.commit()

            logger.info(
                "rating_created",
                event_id=str(event_id),
                ratee_id=str(ratee_id),
                stars=stars,
            )
            return rating

    async def list_for_user(self, user_id: UUID) -> list[Rating]:
        """Ratings a user has received, newest first."""
        async with self._uow_factory() as uow:
            if not await uow.profiles.get(user_id):
                raise ProfileNotFoundError(str(user_id))
            return await uow.ratings.get_for_ratee(user_id)

    async def _took_part(self, uow: IUnitOfWork, event: Event, user_id: UUID) -> bool:
        if event.host_id == user_id:
            return True
        attendee = await uow.events.get_attendee(event.id, user_id)
        return attendee is not None and attendee.status == AttendeeStatus.JOINED
