"""Profile API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_profile_service, get_rating_service
from api.v1.routes.ratings import to_rating_response
from api.v1.schemas.profile import (
    ProfileCreate,
    ProfileDetailResponse,
    ProfileResponse,
    ProfileUpdate,
    PublicProfileDetailResponse,
    PublicProfileResponse,
)
from api.v1.schemas.rating import RatingListResponse
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.profile_service import ProfileService
from domain.services.rating_service import RatingService

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post(
    "",
    response_model=ProfileDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create my profile",
    responses={
        201: {"description": "Profile created"},
        409: {"description": "Profile already exists"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_profile(
    request: Request,
    body: ProfileCreate,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Create the caller's profile. The id and email come from the session."""
    profile = await service.create(
        user_id=user.id,
        email=user.email,
        **body.model_dump(),
    )
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))


@router.get("/me", response_model=ProfileDetailResponse, summary="Get my profile")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_my_profile(
    request: Request,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    profile = await service.get(user.id)
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))


@router.patch(
    "/me",
    response_model=ProfileDetailResponse,
    summary="Update my profile",
    responses={404: {"description": "Profile not created yet"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_my_profile(
    request: Request,
    body: ProfileUpdate,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileDetailResponse:
    """Partial update. Rating aggregates cannot be changed here."""
    profile = await service.update(user.id, body.model_dump(exclude_unset=True))
    return ProfileDetailResponse(data=ProfileResponse.model_validate(profile))


@router.get(
    "/{user_id}",
    response_model=PublicProfileDetailResponse,
    summary="Get a user's public profile",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_profile(
    request: Request,
    user_id: UUID,
    user: CurrentUser,
    service: ProfileService = Depends(get_profile_service),
) -> PublicProfileDetailResponse:
    profile = await service.get(user_id)
    return PublicProfileDetailResponse(data=PublicProfileResponse.model_validate(profile))


@router.get(
    "/{user_id}/ratings",
    response_model=RatingListResponse,
    summary="List ratings a user received",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_profile_ratings(
    request: Request,
    user_id: UUID,
    user: CurrentUser,
    service: RatingService = Depends(get_rating_service),
) -> RatingListResponse:
    ratings = await service.list_for_user(user_id)
    return RatingListResponse(
        data=[to_rating_response(r) for r in ratings],
        meta={"count": len(ratings)},
    )
