"""Unit tests for exception handlers."""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import IntegrityError

from api.exception_handlers import setup_exception_handlers
from api.v1.schemas.message import MessageCreate
from core.exceptions import EventFullError, EventNotFoundError


@pytest.fixture
def app() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)

    @app.get("/events/missing")
    async def missing() -> None:
        raise EventNotFoundError("e-1")

    @app.post("/events/full/join")
    async def full() -> None:
        raise EventFullError("e-2")

    @app.post("/attendees")
    async def duplicate_row() -> None:
        raise IntegrityError(
            "INSERT INTO event_attendees", {}, Exception("UNIQUE constraint failed")
        )

    @app.post("/messages")
    async def post_message(body: MessageCreate) -> dict[str, str]:
        return {"content": body.content}

    return app


@pytest.fixture
async def client(app: FastAPI):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c


class TestExceptionHandlers:
    @pytest.mark.asyncio
    async def test_not_found_carries_details(self, client: AsyncClient) -> None:
        response = await client.get("/events/missing")

        assert response.status_code == 404
        assert response.json() == {
            "error_code": "EVENT_NOT_FOUND",
            "message": "Event not found: e-1",
            "details": {"event_id": "e-1"},
        }

    @pytest.mark.asyncio
    async def test_event_full_is_conflict(self, client: AsyncClient) -> None:
        response = await client.post("/events/full/join")

        assert response.status_code == 409
        assert response.json()["error_code"] == "EVENT_FULL"

    @pytest.mark.asyncio
    async def test_unmapped_constraint_violation(self, client: AsyncClient) -> None:
        response = await client.post("/attendees")

        assert response.status_code == 409
        assert response.json()["error_code"] == "DATABASE_ERROR"

    @pytest.mark.asyncio
    async def test_blank_message_names_the_field(self, client: AsyncClient) -> None:
        response = await client.post("/messages", json={"content": "   "})

        assert response.status_code == 422
        body = response.json()
        assert body["error_code"] == "VALIDATION_ERROR"
        assert [d["field"] for d in body["details"]] == ["body.content"]

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient) -> None:
        response = await client.get("/nowhere")

        assert response.status_code == 404
        assert response.json()["error_code"] == "HTTP_ERROR"

    @pytest.mark.asyncio
    async def test_unhandled_exception_reports_request_id(self, app: FastAPI) -> None:
        handler = app.exception_handlers[Exception]
        request = MagicMock()
        request.state.request_id = "req-123"

        response = await handler(request, RuntimeError("boom"))  # type: ignore[misc]

        assert response.status_code == 500
        body = json.loads(response.body)
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["details"] == {"request_id": "req-123"}
