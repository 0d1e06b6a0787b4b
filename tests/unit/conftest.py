"""Shared fixtures for unit tests."""

from datetime import datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.event import Event, EventCategory
from domain.entities.message import Thread, ThreadType
from domain.entities.profile import Profile


class FakeUnitOfWork:
    """Fake Unit of Work with repository mocks for unit testing."""

    def __init__(self) -> None:
        self.profiles = AsyncMock()
        self.events = AsyncMock()
        self.carpools = AsyncMock()
        self.ratings = AsyncMock()
        self.messages = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, exc_type: Any, *args: Any) -> None:
        if exc_type and not self.committed:
            await self.rollback()


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def host_id() -> UUID:
    """A random host ID (distinct from user_id)."""
    return uuid4()


@pytest.fixture
def make_event(host_id: UUID):
    """Build an active event hosted by ``host_id``."""

    def _make(**overrides: Any) -> Event:
        start = datetime.utcnow() + timedelta(days=2)
        fields: dict[str, Any] = {
            "host_id": host_id,
            "title": "Board games night",
            "category": EventCategory.SOCIAL,
            "location_text": "Student union",
            "start_time": start,
            "end_time": start + timedelta(hours=3),
        }
        fields.update(overrides)
        return Event(**fields)

    return _make


@pytest.fixture
def profile(user_id: UUID) -> Profile:
    return Profile(id=user_id, email="ada@campus.edu", full_name="Ada")


@pytest.fixture
def event_thread() -> Thread:
    return Thread(type=ThreadType.EVENT, event_id=uuid4())
