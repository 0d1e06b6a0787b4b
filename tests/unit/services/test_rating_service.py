"""Unit tests for Rating service layer."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import EventNotFoundError, InvalidRatingError
from domain.entities.event import AttendeeStatus, EventAttendee
from domain.entities.profile import Profile
from domain.entities.rating import QuickTag
from domain.services.rating_service import RatingService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> RatingService:
    return RatingService(lambda: uow)


@pytest.fixture
def shared_event(uow: FakeUnitOfWork, make_event, user_id: UUID):
    """A completed-looking event that ``user_id`` joined."""
    event = make_event()
    uow.events.get.return_value = event
    uow.profiles.get.return_value = Profile(full_name="Someone")
    uow.events.get_attendee.return_value = EventAttendee(
        event_id=event.id, user_id=user_id, status=AttendeeStatus.JOINED
    )
    uow.ratings.create.side_effect = lambda r: r
    return event


class TestCreateRating:
    @pytest.mark.asyncio
    async def test_attendee_rates_host(
        self,
        service: RatingService,
        uow: FakeUnitOfWork,
        shared_event,
        user_id: UUID,
        host_id: UUID,
    ) -> None:
        rating = await service.create(
            shared_event.id, user_id, host_id, 5, quick_tags=[QuickTag.ORGANIZED]
        )

        assert rating.stars == 5
        assert rating.quick_tags == [QuickTag.ORGANIZED]
        uow.profiles.apply_rating.assert_awaited_once_with(host_id, 5)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_cannot_rate_yourself(
        self, service: RatingService, uow: FakeUnitOfWork, user_id: UUID
    ) -> None:
        with pytest.raises(InvalidRatingError):
            await service.create(uuid4(), user_id, user_id, 4)

        uow.events.get.assert_not_called()

    @pytest.mark.asyncio
    async def test_ratee_must_have_attended(
        self,
        service: RatingService,
        uow: FakeUnitOfWork,
        shared_event,
        host_id: UUID,
    ) -> None:
        uow.events.get_attendee.return_value = None

        with pytest.raises(InvalidRatingError):
            await service.create(shared_event.id, host_id, uuid4(), 3)

        uow.ratings.create.assert_not_called()
        uow.profiles.apply_rating.assert_not_called()

    @pytest.mark.asyncio
    async def test_requester_did_not_take_part(
        self,
        service: RatingService,
        uow: FakeUnitOfWork,
        shared_event,
        user_id: UUID,
        host_id: UUID,
    ) -> None:
        uow.events.get_attendee.return_value = EventAttendee(
            event_id=shared_event.id, user_id=user_id, status=AttendeeStatus.REQUESTED
        )

        with pytest.raises(InvalidRatingError):
            await service.create(shared_event.id, user_id, host_id, 2)

    @pytest.mark.asyncio
    async def test_unknown_event(
        self, service: RatingService, uow: FakeUnitOfWork, user_id: UUID, host_id: UUID
    ) -> None:
        uow.events.get.return_value = None

        with pytest.raises(EventNotFoundError):
            await service.create(uuid4(), user_id, host_id, 5)
