"""SQLAlchemy implementation of Carpool repository."""

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import AlreadyRequestedSeatError
from domain.entities.carpool import (
    Carpool,
    CarpoolRequest,
    CarpoolRequestStatus,
    CarpoolStatus,
)
from infrastructure.database.models import CarpoolModel, CarpoolRequestModel


class SQLAlchemyCarpoolRepository:
    """SQLAlchemy implementation of ICarpoolRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> Carpool | None:
        """Get a carpool by ID."""
        stmt = (
            select(CarpoolModel)
            .where(CarpoolModel.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_for_event(self, event_id: UUID) -> list[Carpool]:
        """Get all carpools offered for an event, earliest departure first."""
        stmt = (
            select(CarpoolModel)
            .where(CarpoolModel.event_id == event_id)
            .order_by(CarpoolModel.depart_time)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def create(self, carpool: Carpool) -> Carpool:
        """Create a new carpool."""
        model = self._to_model(carpool)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, carpool: Carpool) -> Carpool:
        """Update a carpool's status.

        Seat counts only move through try_reserve_seats.
        """
        stmt = select(CarpoolModel).where(CarpoolModel.id == carpool.id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError(f"Carpool {carpool.id} not found")

        model.status = carpool.status.value
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def try_reserve_seats(self, id: UUID, seats: int) -> bool:
        """Take seats in a single guarded UPDATE on an active ride."""
        stmt = (
            update(CarpoolModel)
            .where(
                CarpoolModel.id == id,
                CarpoolModel.status == CarpoolStatus.ACTIVE.value,
                CarpoolModel.seats_available >= seats,
            )
            .values(seats_available=CarpoolModel.seats_available - seats)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def get_request(self, request_id: UUID) -> CarpoolRequest | None:
        """Get a seat request by ID."""
        stmt = select(CarpoolRequestModel).where(CarpoolRequestModel.id == request_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._request_to_entity(model) if model else None

    async def get_requests(self, carpool_id: UUID) -> list[CarpoolRequest]:
        """Get all seat requests for a carpool, oldest first."""
        stmt = (
            select(CarpoolRequestModel)
            .where(CarpoolRequestModel.carpool_id == carpool_id)
            .order_by(CarpoolRequestModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._request_to_entity(model) for model in result.scalars()]

    async def add_request(self, request: CarpoolRequest) -> CarpoolRequest:
        """Insert a seat request."""
        model = self._request_to_model(request)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise AlreadyRequestedSeatError(str(request.carpool_id)) from e
        await self._session.refresh(model)
        return self._request_to_entity(model)

    async def update_request_status(
        self, request_id: UUID, status: CarpoolRequestStatus
    ) -> CarpoolRequest:
        """Change the status of a seat request."""
        stmt = select(CarpoolRequestModel).where(CarpoolRequestModel.id == request_id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if not model:
            raise ValueError("Carpool request not found")

        model.status = status.value
        await self._session.flush()
        await self._session.refresh(model)
        return self._request_to_entity(model)

    def _to_entity(self, model: CarpoolModel) -> Carpool:
        """Convert ORM model to domain entity."""
        return Carpool(
            id=model.id,
            event_id=model.event_id,
            driver_id=model.driver_id,
            origin_text=model.origin_text,
            destination_text=model.destination_text,
            depart_time=model.depart_time,
            depart_window=model.depart_window,
            seats_total=model.seats_total,
            seats_available=model.seats_available,
            cost_per_person=model.cost_per_person,
            meeting_spot=model.meeting_spot,
            vehicle_info=model.vehicle_info,
            safety_notes=model.safety_notes,
            status=CarpoolStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: Carpool) -> CarpoolModel:
        """Convert domain entity to ORM model."""
        return CarpoolModel(
            id=entity.id,
            event_id=entity.event_id,
            driver_id=entity.driver_id,
            origin_text=entity.origin_text,
            destination_text=entity.destination_text,
            depart_time=entity.depart_time,
            depart_window=entity.depart_window,
            seats_total=entity.seats_total,
            seats_available=entity.seats_available,
            cost_per_person=entity.cost_per_person,
            meeting_spot=entity.meeting_spot,
            vehicle_info=entity.vehicle_info,
            safety_notes=entity.safety_notes,
            status=entity.status.value,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def _request_to_entity(self, model: CarpoolRequestModel) -> CarpoolRequest:
        """Convert request ORM model to domain entity."""
        return CarpoolRequest(
            id=model.id,
            carpool_id=model.carpool_id,
            rider_id=model.rider_id,
            seats_requested=model.seats_requested,
            pickup_location=model.pickup_location,
            message=model.message,
            status=CarpoolRequestStatus(model.status),
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _request_to_model(self, entity: CarpoolRequest) -> CarpoolRequestModel:
        """Convert request domain entity to ORM model."""
        return CarpoolRequestModel(
            id=entity.id,
            carpool_id=entity.carpool_id,
            rider_id=entity.rider_id,
            seats_requested=entity.seats_requested,
            pickup_location=entity.pickup_location,
            message=entity.message,
            status=entity.status.value,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
