"""Fixtures for API integration tests."""

from collections.abc import Awaitable, Callable
from typing import Any

import pytest
from httpx import AsyncClient

from infrastructure.auth.provider import TokenUser

SignUp = Callable[..., Awaitable[tuple[TokenUser, dict[str, str]]]]


@pytest.fixture
def sign_up(client: AsyncClient, make_user) -> SignUp:
    """Issue a session for a new user and create their profile."""

    async def _sign_up(
        full_name: str = "Test Student", **profile: Any
    ) -> tuple[TokenUser, dict[str, str]]:
        user, headers = make_user(full_name)
        response = await client.post(
            "/api/v1/profiles",
            json={"full_name": full_name, "campus_name": "North Campus", **profile},
            headers=headers,
        )
        assert response.status_code == 201, response.text
        return user, headers

    return _sign_up


@pytest.fixture
def host_event(client: AsyncClient, event_payload):
    """Create an event as the given host and return its JSON."""

    async def _host(headers: dict[str, str], **overrides: Any) -> dict[str, Any]:
        response = await client.post(
            "/api/v1/events", json=event_payload(**overrides), headers=headers
        )
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _host
