"""Rating API routes."""

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_rating_service
from api.v1.schemas.rating import RatingCreate, RatingDetailResponse, RatingResponse
from core.rate_limit import WRITE_LIMIT, limiter
from domain.entities.rating import Rating
from domain.services.rating_service import RatingService

router = APIRouter(prefix="/ratings", tags=["ratings"])


def to_rating_response(rating: Rating) -> RatingResponse:
    """Hide the rater on anonymous ratings."""
    response = RatingResponse.model_validate(rating)
    if rating.is_anonymous:
        response.rater_id = None
    return response


@router.post(
    "",
    response_model=RatingDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Rate someone from a shared event",
    responses={
        400: {"description": "Self rating, or users did not share the event"},
        409: {"description": "Already rated this user for this event"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_rating(
    request: Request,
    body: RatingCreate,
    user: CurrentUser,
    service: RatingService = Depends(get_rating_service),
) -> RatingDetailResponse:
    rating = await service.create(
        event_id=body.event_id,
        rater_id=user.id,
        ratee_id=body.ratee_id,
        stars=body.stars,
        quick_tags=body.quick_tags,
        comment=body.comment,
        is_anonymous=body.is_anonymous,
    )
    return RatingDetailResponse(data=to_rating_response(rating))
