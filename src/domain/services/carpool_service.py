"""Carpool service layer."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from typing import Any
from uuid import UUID

import structlog

from core.exceptions import (
    AuthorizationError,
    CarpoolFullError,
    CarpoolNotFoundError,
    CarpoolRequestNotFoundError,
    EventNotFoundError,
    EventNotJoinableError,
    InvalidCarpoolRequestError,
    InvalidStateTransitionError,
)
from domain.entities.carpool import (
    Carpool,
    CarpoolRequest,
    CarpoolRequestStatus,
    CarpoolStatus,
)
from domain.entities.event import EventStatus
from domain.entities.message import Thread, ThreadType
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

OFFER_FIELDS = frozenset(
    {
        "origin_text",
        "destination_text",
        "depart_time",
        "depart_window",
        "seats_total",
        "cost_per_person",
        "meeting_spot",
        "vehicle_info",
        "safety_notes",
    }
)


class CarpoolService:
    """Service layer for ride offers and seat requests."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def create(self, event_id: UUID, driver_id: UUID, **fields: Any) -> Carpool:
        """Offer a ride to an active event, with its own chat thread."""
        async with self._uow_factory() as uow:
            event = await uow.events.get(event_id)
            if not event:
                raise EventNotFoundError(str(event_id))
            if event.status != EventStatus.ACTIVE:
                raise EventNotJoinableError(str(event_id), event.status.value)

            carpool = await uow.carpools.create(
                Carpool(
                    event_id=event_id,
                    driver_id=driver_id,
                    **{k: v for k, v in fields.items() if k in OFFER_FIELDS},
                )
            )
            await uow.messages.create_thread(
                Thread(type=ThreadType.CARPOOL, carpool_id=carpool.id),
                participant_ids=[driver_id],
            )
            await uow.commit()

            logger.info(
                "carpool_created",
                carpool_id=str(carpool.id),
                event_id=str(event_id),
                seats_total=carpool.seats_total,
            )
            return carpool

    async def list_for_event(self, event_id: UUID) -> list[Carpool]:
        async with self._uow_factory() as uow:
            return await uow.carpools.get_for_event(event_id)

    async def get(self, carpool_id: UUID) -> Carpool:
        async with self._uow_factory() as uow:
            return await self._get_carpool(uow, carpool_id)

    async def cancel(self, carpool_id: UUID, user_id: UUID) -> Carpool:
        """Withdraw a ride offer (driver only)."""
        async with self._uow_factory() as uow:
            carpool = await self._require_driver(uow, carpool_id, user_id)
            if carpool.status in (CarpoolStatus.CANCELLED, CarpoolStatus.COMPLETED):
                raise InvalidStateTransitionError(
                    carpool.status.value, CarpoolStatus.CANCELLED.value
                )

            updated = await uow.carpools.update(
                replace(carpool, status=CarpoolStatus.CANCELLED, updated_at=datetime.utcnow())
            )
            await uow.commit()

            logger.info("carpool_cancelled", carpool_id=str(carpool_id))
            return updated

    async def list_requests(self, carpool_id: UUID, user_id: UUID) -> list[CarpoolRequest]:
        """Seat requests for a ride (driver only)."""
        async with self._uow_factory() as uow:
            await self._require_driver(uow, carpool_id, user_id)
            return await uow.carpools.get_requests(carpool_id)

    async def request_seat(
        self,
        carpool_id: UUID,
        rider_id: UUID,
        seats_requested: int = 1,
        pickup_location: str | None = None,
        message: str | None = None,
    ) -> CarpoolRequest:
        """Ask the driver for seats."""
        async with self._uow_factory() as uow:
            carpool = await self._get_carpool(uow, carpool_id)

            if carpool.driver_id == rider_id:
                raise InvalidCarpoolRequestError("Drivers cannot request a seat in their own ride")
            if carpool.status != CarpoolStatus.ACTIVE:
                raise InvalidCarpoolRequestError("This ride is not taking requests")
            if seats_requested > carpool.seats_available:
                raise CarpoolFullError(str(carpool_id))

            request = await uow.carpools.add_request(
                CarpoolRequest(
                    carpool_id=carpool_id,
                    rider_id=rider_id,
                    seats_requested=seats_requested,
                    pickup_location=pickup_location,
                    message=message,
                )
            )
            await uow.commit()

            logger.info(
                "carpool_seat_requested",
                carpool_id=str(carpool_id),
                rider_id=str(rider_id),
                seats=seats_requested,
            )
            return request

    async def accept_request(
        self, carpool_id: UUID, request_id: UUID, driver_id: UUID
    ) -> CarpoolRequest:
        """Accept a pending request, reserving its seats atomically."""
        async with self._uow_factory() as uow:
            carpool = await self._require_driver(uow, carpool_id, driver_id)
            request = await self._get_pending_request(uow, carpool_id, request_id)
            if carpool.status != CarpoolStatus.ACTIVE:
                raise InvalidCarpoolRequestError("This ride is not taking riders")

            if not await uow.carpools.try_reserve_seats(carpool_id, request.seats_requested):
                raise CarpoolFullError(str(carpool_id))

            updated = await uow.carpools.update_request_status(
                request_id, CarpoolRequestStatus.ACCEPTED
            )

            refreshed = await uow.carpools.get(carpool_id)
            if refreshed and refreshed.seats_available == 0:
                await uow.carpools.update(replace(refreshed, status=CarpoolStatus.FULL))

            thread = await uow.messages.get_carpool_thread(carpool.id)
            if thread:
                await uow.messages.add_participant(thread.id, request.rider_id)
            await uow.commit()

            logger.info(
                "carpool_request_accepted",
                carpool_id=str(carpool_id),
                request_id=str(request_id),
            )
            return updated

    async def deny_request(
        self, carpool_id: UUID, request_id: UUID, driver_id: UUID
    ) -> CarpoolRequest:
        async with self._uow_factory() as uow:
            await self._require_driver(uow, carpool_id, driver_id)
            await self._get_pending_request(uow, carpool_id, request_id)

            updated = await uow.carpools.update_request_status(
                request_id, CarpoolRequestStatus.DENIED
            )
            await uow.commit()

            logger.info(
                "carpool_request_denied",
                carpool_id=str(carpool_id),
                request_id=str(request_id),
            )
            return updated

    async def cancel_request(
        self, carpool_id: UUID, request_id: UUID, rider_id: UUID
    ) -> CarpoolRequest:
        """Withdraw the rider's own pending request."""
        async with self._uow_factory() as uow:
            request = await self._get_pending_request(uow, carpool_id, request_id)
            if request.rider_id != rider_id:
                raise AuthorizationError("Only the rider can cancel this request")

            updated = await uow.carpools.update_request_status(
                request_id, CarpoolRequestStatus.CANCELLED
            )
            await uow.commit()

            logger.info(
                "carpool_request_cancelled",
                carpool_id=str(carpool_id),
                request_id=str(request_id),
            )
            return updated

    async def _get_carpool(self, uow: IUnitOfWork, carpool_id: UUID) -> Carpool:
        carpool = await uow.carpools.get(carpool_id)
        if not carpool:
            raise CarpoolNotFoundError(str(carpool_id))
        return carpool

    async def _require_driver(
        self, uow: IUnitOfWork, carpool_id: UUID, user_id: UUID
    ) -> Carpool:
        carpool = await self._get_carpool(uow, carpool_id)
        if carpool.driver_id != user_id:
            raise AuthorizationError("Only the driver can manage this ride")
        return carpool

    async def _get_pending_request(
        self, uow: IUnitOfWork, carpool_id: UUID, request_id: UUID
    ) -> CarpoolRequest:
        request = await uow.carpools.get_request(request_id)
        if not request or request.carpool_id != carpool_id:
            raise CarpoolRequestNotFoundError(str(request_id))
        if request.status != CarpoolRequestStatus.PENDING:
            raise InvalidStateTransitionError(
                request.status.value, "resolved"
            )
        return request
