"""Tests for the client join/leave flow."""

from datetime import datetime
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from api.v1.schemas.event import AttendeeResponse
from clients.errors import ErrorKind, RemoteServiceError
from clients.membership import MembershipFlow
from domain.entities.event import AttendeeStatus


@pytest.fixture
def api() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def flow(api: AsyncMock) -> MembershipFlow:
    return MembershipFlow(api)


def _attendee(status: AttendeeStatus) -> AttendeeResponse:
    return AttendeeResponse(
        id=uuid4(),
        event_id=uuid4(),
        user_id=uuid4(),
        status=status,
        notes=None,
        joined_at=datetime.utcnow(),
    )


class TestMembershipFlow:
    @pytest.mark.asyncio
    async def test_join_rereads_event(self, flow: MembershipFlow, api: AsyncMock) -> None:
        event_id = uuid4()
        api.join_event.return_value = _attendee(AttendeeStatus.JOINED)
        refreshed = object()
        api.get_event.return_value = refreshed

        result = await flow.join(event_id, notes="see you")

        assert result.ok
        assert result.is_joined
        assert result.event is refreshed
        api.join_event.assert_awaited_once_with(event_id, notes="see you")
        api.get_event.assert_awaited_once_with(event_id)

    @pytest.mark.asyncio
    async def test_join_pending_approval(self, flow: MembershipFlow, api: AsyncMock) -> None:
        api.join_event.return_value = _attendee(AttendeeStatus.REQUESTED)

        result = await flow.join(uuid4())

        assert result.ok
        assert not result.is_joined
        assert result.status == AttendeeStatus.REQUESTED

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error_code,kind",
        [
            ("EVENT_FULL", ErrorKind.CONFLICT),
            ("ALREADY_ATTENDING", ErrorKind.CONFLICT),
            ("EVENT_NOT_FOUND", ErrorKind.NOT_FOUND),
        ],
    )
    async def test_join_failure_is_reported_without_refresh(
        self, flow: MembershipFlow, api: AsyncMock, error_code: str, kind: ErrorKind
    ) -> None:
        api.join_event.side_effect = RemoteServiceError(
            kind, "rejected", status_code=409, error_code=error_code
        )

        result = await flow.join(uuid4())

        assert not result.ok
        assert result.error == kind
        assert result.error_code == error_code
        assert result.event is None
        api.get_event.assert_not_called()

    @pytest.mark.asyncio
    async def test_leave(self, flow: MembershipFlow, api: AsyncMock) -> None:
        event_id = uuid4()

        result = await flow.leave(event_id)

        assert result.ok
        assert result.status is None
        api.leave_event.assert_awaited_once_with(event_id)
        api.get_event.assert_awaited_once_with(event_id)

    @pytest.mark.asyncio
    async def test_refresh_failure_keeps_success(
        self, flow: MembershipFlow, api: AsyncMock
    ) -> None:
        api.get_event.side_effect = RemoteServiceError(ErrorKind.TRANSIENT, "offline")

        result = await flow.leave(uuid4())

        assert result.ok
        assert result.event is None

    @pytest.mark.asyncio
    async def test_toggle(self, flow: MembershipFlow, api: AsyncMock) -> None:
        api.join_event.return_value = _attendee(AttendeeStatus.JOINED)
        event_id = uuid4()

        await flow.toggle(event_id, is_member=True)
        api.leave_event.assert_awaited_once_with(event_id)
        api.join_event.assert_not_called()

        await flow.toggle(event_id, is_member=False)
        api.join_event.assert_awaited_once()
