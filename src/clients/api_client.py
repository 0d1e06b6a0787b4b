"""Async API client for the TwoGether service.

Every mutating call validates its payload against the service's own request
schema before dispatch, and every call checks for a session token first.
Neither failure sends a request.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, TypeVar
from uuid import UUID

import httpx
import structlog
from pydantic import BaseModel, ValidationError

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
from api.v1.schemas.message import (
    DirectThreadCreate,
    MessageCreate,
    MessageDetailResponse,
    MessageListResponse,
    MessageResponse,
    MessageViewDetailResponse,
    MessageViewResponse,
    ThreadDetailResponse,
    ThreadListResponse,
    ThreadResponse,
)
from api.v1.schemas.profile import (
    ProfileCreate,
    ProfileDetailResponse,
    ProfileResponse,
    ProfileUpdate,
    PublicProfileDetailResponse,
    PublicProfileResponse,
)
from api.v1.schemas.rating import (
    RatingCreate,
    RatingDetailResponse,
    RatingListResponse,
    RatingResponse,
)
from clients.errors import (
    InvalidInputError,
    UnauthorizedError,
    error_from_response,
    error_from_transport,
)
from domain.entities.event import EventCategory

logger = structlog.get_logger()

API_PREFIX = "/api/v1"

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def validate_payload(
    schema: type[SchemaT], payload: Mapping[str, Any], partial: bool = False
) -> dict[str, Any]:
    """Validate ``payload`` against ``schema`` and return the JSON body.

    With ``partial`` only the keys the caller supplied are sent.

    Raises:
        InvalidInputError: If the payload does not satisfy the schema
    """
    try:
        model = schema.model_validate(dict(payload))
    except ValidationError as e:
        details = [
            {
                "field": ".".join(str(loc) for loc in err["loc"]),
                "message": err["msg"],
            }
            for err in e.errors()
        ]
        raise InvalidInputError(f"Invalid {schema.__name__}", details) from e
    return model.model_dump(mode="json", exclude_unset=partial)


class TwoGetherClient:
    """Data-access layer used by views.

    Usage:
        async with TwoGetherClient("https://api.example.edu", token=jwt) as api:
            event = await api.get_event(event_id)
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._token = token
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def __aenter__(self) -> "TwoGetherClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- Session ---

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def set_token(self, token: str | None) -> None:
        """Install (or with None, clear) the session token."""
        self._token = token

    def _auth_headers(self) -> dict[str, str]:
        if not self._token:
            raise UnauthorizedError()
        return {"Authorization": f"Bearer {self._token}"}

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        headers = self._auth_headers()
        try:
            response = await self._http.request(
                method,
                f"{API_PREFIX}{path}",
                json=json,
                params=params,
                headers=headers,
            )
        except httpx.TransportError as e:
            logger.warning("api_unreachable", method=method, path=path, error=str(e))
            raise error_from_transport(e) from e

        if response.is_error:
            error = error_from_response(response)
            logger.info(
                "api_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                error_code=error.error_code,
            )
            raise error
        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        return response.json()

    # --- Profiles ---

    async def create_profile(self, **fields: Any) -> ProfileResponse:
        self._auth_headers()
        body = validate_payload(ProfileCreate, fields)
        data = await self._request("POST", "/profiles", json=body)
        return ProfileDetailResponse.model_validate(data).data

    async def get_my_profile(self) -> ProfileResponse:
        data = await self._request("GET", "/profiles/me")
        return ProfileDetailResponse.model_validate(data).data

    async def update_my_profile(self, **changes: Any) -> ProfileResponse:
        self._auth_headers()
        body = validate_payload(ProfileUpdate, changes, partial=True)
        data = await self._request("PATCH", "/profiles/me", json=body)
        return ProfileDetailResponse.model_validate(data).data

    async def get_profile(self, user_id: UUID) -> PublicProfileResponse:
        data = await self._request("GET", f"/profiles/{user_id}")
        return PublicProfileDetailResponse.model_validate(data).data

    async def list_ratings_for(self, user_id: UUID) -> list[RatingResponse]:
        data = await self._request("GET", f"/profiles/{user_id}/ratings")
        return RatingListResponse.model_validate(data).data

    # --- Events ---

    async def list_events(
        self,
        category: EventCategory | None = None,
        campus: str | None = None,
        starts_after: datetime | None = None,
        starts_before: datetime | None = None,
        only_free: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> list[EventResponse]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if category:
            params["category"] = category.value
        if campus:
            params["campus"] = campus
        if starts_after:
            params["starts_after"] = starts_after.isoformat()
        if starts_before:
            params["starts_before"] = starts_before.isoformat()
        if only_free:
            params["only_free"] = "true"
        data = await self._request("GET", "/events", params=params)
        return EventListResponse.model_validate(data).data

    async def list_hosted_events(self) -> list[EventResponse]:
        data = await self._request("GET", "/events/hosting")
        return EventListResponse.model_validate(data).data

    async def get_event(self, event_id: UUID) -> EventResponse:
        data = await self._request("GET", f"/events/{event_id}")
        return EventDetailResponse.model_validate(data).data

    async def create_event(self, **fields: Any) -> EventResponse:
        self._auth_headers()
        body = validate_payload(EventCreate, fields)
        data = await self._request("POST", "/events", json=body)
        return EventDetailResponse.model_validate(data).data

    async def update_event(self, event_id: UUID, **changes: Any) -> EventResponse:
        self._auth_headers()
        body = validate_payload(EventUpdate, changes, partial=True)
        data = await self._request("PATCH", f"/events/{event_id}", json=body)
        return EventDetailResponse.model_validate(data).data

    async def cancel_event(self, event_id: UUID) -> EventResponse:
        data = await self._request("POST", f"/events/{event_id}/cancel")
        return EventDetailResponse.model_validate(data).data

    async def complete_event(self, event_id: UUID) -> EventResponse:
        data = await self._request("POST", f"/events/{event_id}/complete")
        return EventDetailResponse.model_validate(data).data

    # --- Membership ---

    async def join_event(self, event_id: UUID, notes: str | None = None) -> AttendeeResponse:
        self._auth_headers()
        body = validate_payload(JoinEventRequest, {"notes": notes})
        data = await self._request("POST", f"/events/{event_id}/join", json=body)
        return AttendeeDetailResponse.model_validate(data).data

    async def leave_event(self, event_id: UUID) -> None:
        await self._request("DELETE", f"/events/{event_id}/join")

    async def list_attendees(self, event_id: UUID) -> list[AttendeeResponse]:
        data = await self._request("GET", f"/events/{event_id}/attendees")
        return AttendeeListResponse.model_validate(data).data

    async def approve_attendee(self, event_id: UUID, user_id: UUID) -> AttendeeResponse:
        data = await self._request("POST", f"/events/{event_id}/attendees/{user_id}/approve")
        return AttendeeDetailResponse.model_validate(data).data

    async def deny_attendee(self, event_id: UUID, user_id: UUID) -> AttendeeResponse:
        data = await self._request("POST", f"/events/{event_id}/attendees/{user_id}/deny")
        return AttendeeDetailResponse.model_validate(data).data

    # --- Carpools ---

    async def list_carpools(self, event_id: UUID) -> list[CarpoolResponse]:
        data = await self._request("GET", f"/events/{event_id}/carpools")
        return CarpoolListResponse.model_validate(data).data

    async def create_carpool(self, **fields: Any) -> CarpoolResponse:
        self._auth_headers()
        body = validate_payload(CarpoolCreate, fields)
        data = await self._request("POST", "/carpools", json=body)
        return CarpoolDetailResponse.model_validate(data).data

    async def get_carpool(self, carpool_id: UUID) -> CarpoolResponse:
        data = await self._request("GET", f"/carpools/{carpool_id}")
        return CarpoolDetailResponse.model_validate(data).data

    async def cancel_carpool(self, carpool_id: UUID) -> CarpoolResponse:
        data = await self._request("POST", f"/carpools/{carpool_id}/cancel")
        return CarpoolDetailResponse.model_validate(data).data

    async def list_seat_requests(self, carpool_id: UUID) -> list[SeatRequestResponse]:
        data = await self._request("GET", f"/carpools/{carpool_id}/requests")
        return SeatRequestListResponse.model_validate(data).data

    async def request_seat(self, carpool_id: UUID, **fields: Any) -> SeatRequestResponse:
        self._auth_headers()
        body = validate_payload(SeatRequestCreate, fields)
        data = await self._request("POST", f"/carpools/{carpool_id}/requests", json=body)
        return SeatRequestDetailResponse.model_validate(data).data

    async def accept_seat_request(
        self, carpool_id: UUID, request_id: UUID
    ) -> SeatRequestResponse:
        return await self._resolve_seat_request(carpool_id, request_id, "accept")

    async def deny_seat_request(self, carpool_id: UUID, request_id: UUID) -> SeatRequestResponse:
        return await self._resolve_seat_request(carpool_id, request_id, "deny")

    async def cancel_seat_request(
        self, carpool_id: UUID, request_id: UUID
    ) -> SeatRequestResponse:
        return await self._resolve_seat_request(carpool_id, request_id, "cancel")

    async def _resolve_seat_request(
        self, carpool_id: UUID, request_id: UUID, action: str
    ) -> SeatRequestResponse:
        data = await self._request(
            "POST", f"/carpools/{carpool_id}/requests/{request_id}/{action}"
        )
        return SeatRequestDetailResponse.model_validate(data).data

    # --- Ratings ---

    async def create_rating(self, **fields: Any) -> RatingResponse:
        self._auth_headers()
        body = validate_payload(RatingCreate, fields)
        data = await self._request("POST", "/ratings", json=body)
        return RatingDetailResponse.model_validate(data).data

    # --- Chat ---

    async def list_event_messages(self, event_id: UUID) -> list[MessageViewResponse]:
        data = await self._request("GET", f"/events/{event_id}/messages")
        return MessageListResponse.model_validate(data).data

    async def get_message(self, message_id: UUID) -> MessageViewResponse:
        data = await self._request("GET", f"/messages/{message_id}")
        return MessageViewDetailResponse.model_validate(data).data

    async def send_event_message(self, event_id: UUID, content: str) -> MessageResponse:
        self._auth_headers()
        body = validate_payload(MessageCreate, {"content": content})
        data = await self._request("POST", f"/events/{event_id}/messages", json=body)
        return MessageDetailResponse.model_validate(data).data

    async def list_threads(self) -> list[ThreadResponse]:
        data = await self._request("GET", "/threads")
        return ThreadListResponse.model_validate(data).data

    async def open_direct_thread(self, user_id: UUID) -> ThreadResponse:
        self._auth_headers()
        body = validate_payload(DirectThreadCreate, {"user_id": user_id})
        data = await self._request("POST", "/threads/direct", json=body)
        return ThreadDetailResponse.model_validate(data).data

    async def list_thread_messages(self, thread_id: UUID) -> list[MessageViewResponse]:
        data = await self._request("GET", f"/threads/{thread_id}/messages")
        return MessageListResponse.model_validate(data).data

    async def send_thread_message(self, thread_id: UUID, content: str) -> MessageResponse:
        self._auth_headers()
        body = validate_payload(MessageCreate, {"content": content})
        data = await self._request("POST", f"/threads/{thread_id}/messages", json=body)
        return MessageDetailResponse.model_validate(data).data
