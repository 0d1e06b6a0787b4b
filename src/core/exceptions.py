"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    NOT_A_PARTICIPANT = "NOT_A_PARTICIPANT"

    # Not found errors (404)
    PROFILE_NOT_FOUND = "PROFILE_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    ATTENDEE_NOT_FOUND = "ATTENDEE_NOT_FOUND"
    CARPOOL_NOT_FOUND = "CARPOOL_NOT_FOUND"
    CARPOOL_REQUEST_NOT_FOUND = "CARPOOL_REQUEST_NOT_FOUND"
    THREAD_NOT_FOUND = "THREAD_NOT_FOUND"
    MESSAGE_NOT_FOUND = "MESSAGE_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    EVENT_NOT_JOINABLE = "EVENT_NOT_JOINABLE"
    INVALID_STATE_TRANSITION = "INVALID_STATE_TRANSITION"
    INVALID_RATING = "INVALID_RATING"
    INVALID_CARPOOL_REQUEST = "INVALID_CARPOOL_REQUEST"

    # Conflict errors (409)
    PROFILE_ALREADY_EXISTS = "PROFILE_ALREADY_EXISTS"
    ALREADY_ATTENDING = "ALREADY_ATTENDING"
    EVENT_FULL = "EVENT_FULL"
    DUPLICATE_RATING = "DUPLICATE_RATING"
    ALREADY_REQUESTED_SEAT = "ALREADY_REQUESTED_SEAT"
    CARPOOL_FULL = "CARPOOL_FULL"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class NotAParticipantError(AppException):
    """User is not a participant of the conversation."""

    def __init__(self, thread_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.NOT_A_PARTICIPANT,
            message="You are not a participant in this conversation",
            status_code=403,
            details={"thread_id": thread_id},
        )


class ProfileNotFoundError(AppException):
    """Profile not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_NOT_FOUND,
            message=f"Profile not found: {user_id}",
            status_code=404,
            details={"user_id": user_id},
        )


class EventNotFoundError(AppException):
    """Event not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.EVENT_NOT_FOUND,
            message=f"Event not found: {event_id}",
            status_code=404,
            details={"event_id": event_id},
        )


class AttendeeNotFoundError(AppException):
    """Attendee row not found for the event."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ATTENDEE_NOT_FOUND,
            message="User has no membership for this event",
            status_code=404,
            details={"user_id": user_id},
        )


class CarpoolNotFoundError(AppException):
    """Carpool not found."""

    def __init__(self, carpool_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.CARPOOL_NOT_FOUND,
            message=f"Carpool not found: {carpool_id}",
            status_code=404,
            details={"carpool_id": carpool_id},
        )


class CarpoolRequestNotFoundError(AppException):
    """Carpool seat request not found."""

    def __init__(self, request_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.CARPOOL_REQUEST_NOT_FOUND,
            message=f"Carpool request not found: {request_id}",
            status_code=404,
            details={"request_id": request_id},
        )


class ThreadNotFoundError(AppException):
    """Thread not found."""

    def __init__(self, thread_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.THREAD_NOT_FOUND,
            message=f"Thread not found: {thread_id}",
            status_code=404,
            details={"thread_id": thread_id},
        )


class MessageNotFoundError(AppException):
    """Message not found."""

    def __init__(self, message_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.MESSAGE_NOT_FOUND,
            message=f"Message not found: {message_id}",
            status_code=404,
            details={"message_id": message_id},
        )


class EventNotJoinableError(AppException):
    """Event is not open for membership changes."""

    def __init__(self, event_id: str, status: str) -> None:
        super().__init__(
            error_code=ErrorCode.EVENT_NOT_JOINABLE,
            message=f"Event is {status} and cannot be joined",
            status_code=400,
            details={"event_id": event_id, "status": status},
        )


class InvalidStateTransitionError(AppException):
    """Requested status change is not allowed from the current state."""

    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_STATE_TRANSITION,
            message=f"Cannot change status from {current} to {target}",
            status_code=400,
            details={"current": current, "target": target},
        )


class InvalidRatingError(AppException):
    """Rating does not satisfy the shared-event rules."""

    def __init__(self, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_RATING,
            message=message,
            status_code=400,
        )


class InvalidCarpoolRequestError(AppException):
    """Seat request cannot be made or changed."""

    def __init__(self, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_CARPOOL_REQUEST,
            message=message,
            status_code=400,
        )


class ProfileAlreadyExistsError(AppException):
    """Profile has already been created for this user."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.PROFILE_ALREADY_EXISTS,
            message="Profile already exists",
            status_code=409,
            details={"user_id": user_id},
        )


class AlreadyAttendingError(AppException):
    """User already has a membership row for the event."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_ATTENDING,
            message="Already attending this event",
            status_code=409,
            details={"event_id": event_id},
        )


class EventFullError(AppException):
    """Event has reached max_attendees."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.EVENT_FULL,
            message="Event is full",
            status_code=409,
            details={"event_id": event_id},
        )


class DuplicateRatingError(AppException):
    """Rater already rated this person for this event."""

    def __init__(self, event_id: str, ratee_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.DUPLICATE_RATING,
            message="You have already rated this person for this event",
            status_code=409,
            details={"event_id": event_id, "ratee_id": ratee_id},
        )


class AlreadyRequestedSeatError(AppException):
    """Rider already has a seat request for the carpool."""

    def __init__(self, carpool_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ALREADY_REQUESTED_SEAT,
            message="You have already requested a seat in this carpool",
            status_code=409,
            details={"carpool_id": carpool_id},
        )


class CarpoolFullError(AppException):
    """Not enough seats left in the carpool."""

    def __init__(self, carpool_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.CARPOOL_FULL,
            message="Not enough seats available",
            status_code=409,
            details={"carpool_id": carpool_id},
        )
