"""Profile service layer."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import ProfileAlreadyExistsError, ProfileNotFoundError
from domain.entities.profile import Profile
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

# Fields the owner may change; rating aggregates are server maintained.
EDITABLE_FIELDS = frozenset(
    {
        "username",
        "full_name",
        "avatar_url",
        "campus_name",
        "class_year",
        "major",
        "bio",
        "interests",
    }
)


class ProfileService:
    """Service layer for Profile business logic."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get(self, user_id: UUID) -> Profile:
        """Get a profile by user ID."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))
            return profile

    async def create(
        self,
        user_id: UUID,
        email: str,
        full_name: str,
        **fields: Any,
    ) -> Profile:
        """Create the caller's profile. Each user gets exactly one."""
        async with self._uow_factory() as uow:
            if await uow.profiles.get(user_id):
                raise ProfileAlreadyExistsError(str(user_id))

            profile = Profile(
                id=user_id,
                email=email,
                full_name=full_name,
                **{k: v for k, v in fields.items() if k in EDITABLE_FIELDS},
            )
            created = await uow.profiles.create(profile)
            await uow.commit()

            logger.info("profile_created", user_id=str(user_id))
            return created

    async def update(self, user_id: UUID, changes: dict[str, Any]) -> Profile:
        """Apply owner edits to the caller's own profile."""
        async with self._uow_factory() as uow:
            profile = await uow.profiles.get(user_id)
            if not profile:
                raise ProfileNotFoundError(str(user_id))

            allowed = {k: v for k, v in changes.items() if k in EDITABLE_FIELDS}
            if not allowed:
                return profile

            updated = await uow.profiles.update(
                replace(profile, **allowed, updated_at=datetime.utcnow())
            )
            await uow.commit()

            logger.info(
                "profile_updated",
                user_id=str(user_id),
                fields=sorted(allowed),
            )
            return updated
