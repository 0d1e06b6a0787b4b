"""Client-side error taxonomy.

Every failure the API client raises is a ``ClientError`` tagged with an
``ErrorKind``; views branch on the kind, never on HTTP details.
"""

from enum import StrEnum
from typing import Any

import httpx


class ErrorKind(StrEnum):
    """Coarse failure classes surfaced to views."""

    UNAUTHORIZED = "unauthorized"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    TRANSIENT = "transient"
    INTERNAL = "internal"


class ClientError(Exception):
    """Base client error."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        error_code: str | None = None,
        details: Any = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.error_code = error_code
        self.details = details
        super().__init__(message)


class UnauthorizedError(ClientError):
    """No session, or the service rejected the session."""

    def __init__(self, message: str = "Not signed in", error_code: str | None = None) -> None:
        super().__init__(ErrorKind.UNAUTHORIZED, message, error_code)


class InvalidInputError(ClientError):
    """Payload failed schema validation before any request was sent."""

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(ErrorKind.VALIDATION, message, "VALIDATION_ERROR", details)


class RemoteServiceError(ClientError):
    """The service answered with an error, or could not be reached."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: Any = None,
    ) -> None:
        self.status_code = status_code
        super().__init__(kind, message, error_code, details)


def kind_for_status(status_code: int) -> ErrorKind:
    """Map an HTTP error status to an error kind."""
    if status_code in (401, 403):
        return ErrorKind.UNAUTHORIZED
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    if status_code in (400, 422):
        return ErrorKind.VALIDATION
    if status_code == 429:
        return ErrorKind.TRANSIENT
    return ErrorKind.INTERNAL


def error_from_response(response: httpx.Response) -> ClientError:
    """Build the client error for a non-2xx response.

    Reads the service's ``{"error_code", "message", "details"}`` body when
    present.
    """
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    error_code = body.get("error_code")
    message = body.get("message") or response.reason_phrase or "Request failed"
    details = body.get("details")

    if response.status_code == 401:
        return UnauthorizedError(message, error_code)
    return RemoteServiceError(
        kind_for_status(response.status_code),
        message,
        status_code=response.status_code,
        error_code=error_code,
        details=details,
    )


def error_from_transport(exc: httpx.TransportError) -> RemoteServiceError:
    """Connection-level failures are transient."""
    return RemoteServiceError(ErrorKind.TRANSIENT, f"Service unreachable: {exc}")
