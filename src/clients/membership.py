"""Join/leave flow as seen from an event page."""

from dataclasses import dataclass
from uuid import UUID

import structlog

from api.v1.schemas.event import EventResponse
from clients.api_client import TwoGetherClient
from clients.errors import ClientError, ErrorKind
from domain.entities.event import AttendeeStatus

logger = structlog.get_logger()


@dataclass
class MembershipResult:
    """Outcome of a join or leave.

    ``event`` is the re-read event, so ``event.current_attendees`` is the
    service's count. It is None when the mutation failed or the re-read did.
    """

    ok: bool
    status: AttendeeStatus | None = None
    event: EventResponse | None = None
    error: ErrorKind | None = None
    error_code: str | None = None
    message: str | None = None

    @property
    def is_joined(self) -> bool:
        return self.status == AttendeeStatus.JOINED


class MembershipFlow:
    """Joins and leaves events, then refreshes the event.

    The attendee count is never adjusted locally.
    """

    def __init__(self, api: TwoGetherClient) -> None:
        self._api = api

    async def join(self, event_id: UUID, notes: str | None = None) -> MembershipResult:
        try:
            attendee = await self._api.join_event(event_id, notes=notes)
        except ClientError as e:
            return self._failed("join", event_id, e)

        logger.info("membership_joined", event_id=str(event_id), status=attendee.status.value)
        return MembershipResult(
            ok=True,
            status=attendee.status,
            event=await self._refresh(event_id),
        )

    async def leave(self, event_id: UUID) -> MembershipResult:
        try:
            await self._api.leave_event(event_id)
        except ClientError as e:
            return self._failed("leave", event_id, e)

        logger.info("membership_left", event_id=str(event_id))
        return MembershipResult(ok=True, event=await self._refresh(event_id))

    async def toggle(self, event_id: UUID, is_member: bool) -> MembershipResult:
        """Leave when already a member, otherwise join."""
        if is_member:
            return await self.leave(event_id)
        return await self.join(event_id)

    async def _refresh(self, event_id: UUID) -> EventResponse | None:
        try:
            return await self._api.get_event(event_id)
        except ClientError as e:
            logger.warning(
                "membership_refresh_failed",
                event_id=str(event_id),
                error_kind=e.kind.value,
            )
            return None

    def _failed(self, action: str, event_id: UUID, error: ClientError) -> MembershipResult:
        logger.warning(
            "membership_failed",
            action=action,
            event_id=str(event_id),
            error_kind=error.kind.value,
            error_code=error.error_code,
        )
        return MembershipResult(
            ok=False,
            error=error.kind,
            error_code=error.error_code,
            message=error.message,
        )
