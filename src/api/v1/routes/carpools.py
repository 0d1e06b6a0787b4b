"""Carpool API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_carpool_service
from api.v1.schemas.carpool import (
    CarpoolCreate,
    CarpoolDetailResponse,
    CarpoolListResponse,
    CarpoolResponse,
    SeatRequestCreate,
    SeatRequestDetailResponse,
    SeatRequestListResponse,
    SeatRequestResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.carpool_service import CarpoolService

router = APIRouter(prefix="/carpools", tags=["carpools"])

# Mounted under /events so rides are listed next to their event.
event_carpools_router = APIRouter(prefix="/events/{event_id}/carpools", tags=["carpools"])


@event_carpools_router.get(
    "",
    response_model=CarpoolListResponse,
    summary="List rides to an event",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_event_carpools(
    request: Request,
    event_id: UUID,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> CarpoolListResponse:
    carpools = await service.list_for_event(event_id)
    return CarpoolListResponse(
        data=[CarpoolResponse.model_validate(c) for c in carpools],
        meta={"count": len(carpools)},
    )


@router.post(
    "",
    response_model=CarpoolDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Offer a ride",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_carpool(
    request: Request,
    body: CarpoolCreate,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> CarpoolDetailResponse:
    fields = body.model_dump(exclude={"event_id"})
    carpool = await service.create(body.event_id, user.id, **fields)
    return CarpoolDetailResponse(data=CarpoolResponse.model_validate(carpool))


@router.get("/{carpool_id}", response_model=CarpoolDetailResponse, summary="Get a ride")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_carpool(
    request: Request,
    carpool_id: UUID,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> CarpoolDetailResponse:
    carpool = await service.get(carpool_id)
    return CarpoolDetailResponse(data=CarpoolResponse.model_validate(carpool))


@router.post(
    "/{carpool_id}/cancel",
    response_model=CarpoolDetailResponse,
    summary="Cancel a ride (driver only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def cancel_carpool(
    request: Request,
    carpool_id: UUID,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> CarpoolDetailResponse:
    carpool = await service.cancel(carpool_id, user.id)
    return CarpoolDetailResponse(data=CarpoolResponse.model_validate(carpool))


@router.get(
    "/{carpool_id}/requests",
    response_model=SeatRequestListResponse,
    summary="List seat requests (driver only)",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_seat_requests(
    request: Request,
    carpool_id: UUID,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> SeatRequestListResponse:
    requests = await service.list_requests(carpool_id, user.id)
    return SeatRequestListResponse(
        data=[SeatRequestResponse.model_validate(r) for r in requests],
        meta={"count": len(requests)},
    )


@router.post(
    "/{carpool_id}/requests",
    response_model=SeatRequestDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request seats",
    responses={409: {"description": "Already requested, or not enough seats"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def request_seat(
    request: Request,
    carpool_id: UUID,
    body: SeatRequestCreate,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> SeatRequestDetailResponse:
    seat_request = await service.request_seat(
        carpool_id,
        user.id,
        seats_requested=body.seats_requested,
        pickup_location=body.pickup_location,
        message=body.message,
    )
    return SeatRequestDetailResponse(data=SeatRequestResponse.model_validate(seat_request))


@router.post(
    "/{carpool_id}/requests/{request_id}/accept",
    response_model=SeatRequestDetailResponse,
    summary="Accept a seat request (driver only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def accept_seat_request(
    request: Request,
    carpool_id: UUID,
    request_id: UUID,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> SeatRequestDetailResponse:
    seat_request = await service.accept_request(carpool_id, request_id, user.id)
    return SeatRequestDetailResponse(data=SeatRequestResponse.model_validate(seat_request))


@router.post(
    "/{carpool_id}/requests/{request_id}/deny",
    response_model=SeatRequestDetailResponse,
    summary="Deny a seat request (driver only)",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def deny_seat_request(
    request: Request,
    carpool_id: UUID,
    request_id: UUID,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> SeatRequestDetailResponse:
    seat_request = await service.deny_request(carpool_id, request_id, user.id)
    return SeatRequestDetailResponse(data=SeatRequestResponse.model_validate(seat_request))


@router.post(
    "/{carpool_id}/requests/{request_id}/cancel",
    response_model=SeatRequestDetailResponse,
    summary="Withdraw my seat request",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def cancel_seat_request(
    request: Request,
    carpool_id: UUID,
    request_id: UUID,
    user: CurrentUser,
    service: CarpoolService = Depends(get_carpool_service),
) -> SeatRequestDetailResponse:
    seat_request = await service.cancel_request(carpool_id, request_id, user.id)
    return SeatRequestDetailResponse(data=SeatRequestResponse.model_validate(seat_request))
