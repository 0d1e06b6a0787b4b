"""SQLAlchemy implementation of Profile repository."""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import ProfileAlreadyExistsError
from domain.entities.profile import Profile
from infrastructure.database.models import ProfileModel


class SQLAlchemyProfileRepository:
    """SQLAlchemy implementation of IProfileRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Profile | None:
        """Get a profile by user ID."""
        stmt = (
            select(ProfileModel)
            .where(ProfileModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def create(self, profile: Profile) -> Profile:
        """Create a new profile."""
        model = self._to_model(profile)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise ProfileAlreadyExistsError(str(profile.id)) from e
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, profile: Profile) -> Profile:
        """Update owner-editable profile fields."""
        stmt = select(ProfileModel).where(ProfileModel.id == profile.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Profile {profile.id} not found")

        model.username = profile.username
        model.full_name = profile.full_name
        model.avatar_url = profile.avatar_url
        model.campus_name = profile.campus_name
        model.class_year = profile.class_year
        model.major = profile.major
        model.bio = profile.bio
        model.interests = list(profile.interests)

        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def apply_rating(self, id: UUID, stars: int) -> None:
        """Fold a score into the rolling average in a single UPDATE."""
        stmt = (
            update(ProfileModel)
            .where(ProfileModel.id == id)
            .values(
                rating_avg=(ProfileModel.rating_avg * ProfileModel.rating_count + stars)
                / (ProfileModel.rating_count + 1),
                rating_count=ProfileModel.rating_count + 1,
            )
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    def _to_entity(self, model: ProfileModel) -> Profile:
        """Convert ORM model to domain entity."""
        return Profile(
            id=model.id,
            email=model.email,
            username=model.username,
            full_name=model.full_name,
            avatar_url=model.avatar_url,
            campus_name=model.campus_name,
            class_year=model.class_year,
            major=model.major,
            bio=model.bio,
            interests=list(model.interests or []),
            rating_avg=model.rating_avg,
            rating_count=model.rating_count,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Profile) -> ProfileModel:
        """Convert domain entity to ORM model."""
        return ProfileModel(
            id=entity.id,
            email=entity.email,
            username=entity.username,
            full_name=entity.full_name,
            avatar_url=entity.avatar_url,
            campus_name=entity.campus_name,
            class_year=entity.class_year,
            major=entity.major,
            bio=entity.bio,
            interests=list(entity.interests),
            rating_avg=entity.rating_avg,
            rating_count=entity.rating_count,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
