"""SQLAlchemy implementation of Rating repository."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import DuplicateRatingError
from domain.entities.rating import QuickTag, Rating
from infrastructure.database.models import RatingModel


class SQLAlchemyRatingRepository:
    """SQLAlchemy implementation of IRatingRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(self, rating: Rating) -> Rating:
        """Insert a rating."""
        model = self._to_model(rating)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise DuplicateRatingError(str(rating.event_id), str(rating.ratee_id)) from e
        await self._session.refresh(model)
        return self._to_entity(model)

    async def get_for_ratee(self, ratee_id: UUID) -> list[Rating]:
        """Get ratings received by a user, newest first."""
        stmt = (
            select(RatingModel)
            .where(RatingModel.ratee_id == ratee_id)
            .order_by(RatingModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: RatingModel) -> Rating:
        """Convert ORM model to domain entity."""
        return Rating(
            id=model.id,
            event_id=model.event_id,
            rater_id=model.rater_id,
            ratee_id=model.ratee_id,
            stars=model.stars,
            quick_tags=[QuickTag(tag) for tag in model.quick_tags or []],
            comment=model.comment,
            is_anonymous=model.is_anonymous,
            created_at=model.created_at,
        )

    def _to_model(self, entity: Rating) -> RatingModel:
        """Convert domain entity to ORM model."""
        return RatingModel(
            id=entity.id,
            event_id=entity.event_id,
            rater_id=entity.rater_id,
            ratee_id=entity.ratee_id,
            stars=entity.stars,
            quick_tags=[tag.value for tag in entity.quick_tags],
            comment=entity.comment,
            is_anonymous=entity.is_anonymous,
            created_at=entity.created_at,
        )
