"""Event and membership API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_event_service, get_membership_service
from api.v1.schemas.common import UTCDateTime
from api.v1.schemas.event import (
    AttendeeDetailResponse,
    AttendeeListResponse,
    AttendeeResponse,
    EventCreate,
    EventDetailResponse,
    EventListResponse,
    EventResponse,
    EventUpdate,
    JoinEventRequest,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.event import AttendeeStatus, EventCategory, EventFilters
from domain.services.event_service import EventService
from domain.services.membership_service import MembershipService

router = APIRouter(prefix="/events", tags=["events"])


@router.get(
    "",
    response_model=EventListResponse,
    summary="Discover events",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_events(
    request: Request,
    user: CurrentUser,
    service: EventService = Depends(get_event_service),
    category: EventCategory | None = Query(None, description="Filter by category"),
    campus: str | None = Query(None, max_length=100, description="Host's campus"),
    starts_after: UTCDateTime | None = Query(None),
    starts_before: UTCDateTime | None = Query(None),
    only_free: bool = Query(False, description="Only events without a cost"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> EventListResponse:
    """Active public events ordered by start time."""
    filters = EventFilters(
        category=category,
        campus_name=campus,
        starts_after=starts_after,
        starts_before=starts_before,
        only_free=only_free,
        limit=limit,
        offset=offset,
    )
    events = await service.search(filters)
    return EventListResponse(
        data=[EventResponse.model_validate(e) for e in events],
        meta={"count": len(events), "limit": limit, "offset": offset},
    )


@router.get(
    "/hosting",
    response_model=EventListResponse,
    summary="Events I host",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_hosted_events(
    request: Request,
    user: CurrentUser,
    service: EventService = Depends(get_event_service),
) -> EventListResponse:
    events = await service.get_hosted(user.id)
    return EventListResponse(
        data=[EventResponse.model_validate(e) for e in events],
        meta={"count": len(events)},
    )


@router.post(
    "",
    response_model=EventDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Host an event",
    responses={404: {"description": "Host has no profile yet"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_event(
    request: Request,
    body: EventCreate,
    user: CurrentUser,
    service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    event = await service.create(user.id, **body.model_dump())
    return EventDetailResponse(data=EventResponse.model_validate(event))


@router.get(
    "/{event_id}",
    response_model=EventDetailResponse,
    summary="Get an event",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_event(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """Includes the authoritative ``current_attendees`` count."""
    event = await service.get(event_id)
    return EventDetailResponse(data=EventResponse.model_validate(event))


@router.patch(
    "/{event_id}",
    response_model=EventDetailResponse,
    summary="Edit an event (host only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_event(
    request: Request,
    event_id: UUID,
    body: EventUpdate,
    user: CurrentUser,
    service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    event = await service.update(event_id, user.id, body.model_dump(exclude_unset=True))
    return EventDetailResponse(data=EventResponse.model_validate(event))


@router.post(
    "/{event_id}/cancel",
    response_model=EventDetailResponse,
    summary="Cancel an event (host only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def cancel_event(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    event = await service.cancel(event_id, user.id)
    return EventDetailResponse(data=EventResponse.model_validate(event))


@router.post(
    "/{event_id}/complete",
    response_model=EventDetailResponse,
    summary="Mark an event completed (host only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def complete_event(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    event = await service.complete(event_id, user.id)
    return EventDetailResponse(data=EventResponse.model_validate(event))


# --- Membership ---


@router.get(
    "/{event_id}/attendees",
    response_model=AttendeeListResponse,
    summary="List attendees",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_attendees(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> AttendeeListResponse:
    attendees = await service.list_attendees(event_id)
    return AttendeeListResponse(
        data=[AttendeeResponse.model_validate(a) for a in attendees],
        meta={
            "count": len(attendees),
            "joined": sum(1 for a in attendees if a.status == AttendeeStatus.JOINED),
        },
    )


@router.post(
    "/{event_id}/join",
    response_model=AttendeeDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Join an event",
    responses={
        201: {"description": "Joined, or join requested when approval is required"},
        400: {"description": "Event is not active"},
        409: {"description": "Already attending, or event is full"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def join_event(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    body: JoinEventRequest | None = None,
    service: MembershipService = Depends(get_membership_service),
) -> AttendeeDetailResponse:
    """Re-read the event afterwards for the authoritative attendee count."""
    attendee = await service.join(event_id, user.id, notes=body.notes if body else None)
    return AttendeeDetailResponse(data=AttendeeResponse.model_validate(attendee))


@router.delete(
    "/{event_id}/join",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Leave an event",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def leave_event(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> Response:
    """Remove only the caller's row. Succeeds when there is none."""
    await service.leave(event_id, user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{event_id}/attendees/{user_id}/approve",
    response_model=AttendeeDetailResponse,
    summary="Approve a join request (host only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def approve_attendee(
    request: Request,
    event_id: UUID,
    user_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> AttendeeDetailResponse:
    attendee = await service.approve(event_id, user.id, user_id)
    return AttendeeDetailResponse(data=AttendeeResponse.model_validate(attendee))


@router.post(
    "/{event_id}/attendees/{user_id}/deny",
    response_model=AttendeeDetailResponse,
    summary="Deny a join request (host only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def deny_attendee(
    request: Request,
    event_id: UUID,
    user_id: UUID,
    user: CurrentUser,
    service: MembershipService = Depends(get_membership_service),
) -> AttendeeDetailResponse:
    attendee = await service.deny(event_id, user.id, user_id)
    return AttendeeDetailResponse(data=AttendeeResponse.model_validate(attendee))
