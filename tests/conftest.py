"""Pytest configuration and fixtures."""

import os
from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta
from typing import Any
from uuid import uuid4

# Disable rate limiting in tests
os.environ["RATE_LIMIT_ENABLED"] = "false"

import pytest
from fastapi import Depends, FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.pool import StaticPool

from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser
from infrastructure.database.models import Base
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork
from infrastructure.realtime.broker import IRealtimeBroker, RealtimeBroker


# Compile JSONB as JSON for SQLite (used in tests)
@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_: Any, compiler: Any, **kw: Any) -> str:
    return "JSON"


# Test database URL (SQLite in memory)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_SECRET_KEY = "test-secret-key"


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Fresh in-memory database per test.

    StaticPool keeps a single connection so every session sees the same
    in-memory database.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create session factory."""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def uow_factory(
    session_factory: async_sessionmaker[AsyncSession],
) -> Callable[[], SQLAlchemyUnitOfWork]:
    """UoW factory bound to the test database."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(session_factory)

    return factory


@pytest.fixture
def auth_provider() -> JWTAuthProvider:
    """Create auth provider for testing."""
    return JWTAuthProvider(
        secret_key=TEST_SECRET_KEY,
        algorithm="HS256",
        expire_minutes=30,
        jwks_url="",
    )


@pytest.fixture
async def broker() -> AsyncGenerator[RealtimeBroker, None]:
    broker = RealtimeBroker()
    yield broker
    await broker.aclose()


@pytest.fixture
def app(
    uow_factory: Callable[[], SQLAlchemyUnitOfWork],
    auth_provider: JWTAuthProvider,
    broker: RealtimeBroker,
) -> FastAPI:
    """Application wired to the test database, auth provider and broker.

    Authentication runs for real: requests carry tokens issued by
    ``auth_provider``.
    """
    from api.v1.dependencies import (
        get_carpool_service,
        get_chat_service,
        get_event_service,
        get_membership_service,
        get_profile_service,
        get_rating_service,
        get_realtime_broker,
    )
    from domain.services.carpool_service import CarpoolService
    from domain.services.chat_service import ChatService
    from domain.services.event_service import EventService
    from domain.services.membership_service import MembershipService
    from domain.services.profile_service import ProfileService
    from domain.services.rating_service import RatingService
    from main import create_app

    app = create_app()
    app.state.auth_provider = auth_provider
    app.state.realtime_broker = broker

    def override_get_chat_service(
        broker: IRealtimeBroker = Depends(get_realtime_broker),
    ) -> ChatService:
        return ChatService(uow_factory, broker)

    app.dependency_overrides[get_profile_service] = lambda: ProfileService(uow_factory)
    app.dependency_overrides[get_event_service] = lambda: EventService(uow_factory)
    app.dependency_overrides[get_membership_service] = lambda: MembershipService(uow_factory)
    app.dependency_overrides[get_carpool_service] = lambda: CarpoolService(uow_factory)
    app.dependency_overrides[get_rating_service] = lambda: RatingService(uow_factory)
    app.dependency_overrides[get_chat_service] = override_get_chat_service

    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async test client without credentials."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def make_user(auth_provider: JWTAuthProvider) -> Callable[..., tuple[TokenUser, dict[str, str]]]:
    """Build a user and matching Authorization header."""

    def _make(full_name: str = "Test Student") -> tuple[TokenUser, dict[str, str]]:
        user_id = uuid4()
        user = TokenUser(
            id=user_id,
            email=f"{user_id.hex[:8]}@campus.edu",
            full_name=full_name,
        )
        token = auth_provider.create_token(user)
        return user, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
def event_payload() -> Callable[..., dict[str, Any]]:
    """JSON body for ``POST /api/v1/events``."""

    def _payload(**overrides: Any) -> dict[str, Any]:
        start = datetime.utcnow().replace(microsecond=0) + timedelta(days=3)
        payload: dict[str, Any] = {
            "title": "Sunset run",
            "description": "Easy 5k around the lake",
            "category": "fitness",
            "location_text": "Boathouse",
            "start_time": start.isoformat(),
            "end_time": (start + timedelta(hours=1)).isoformat(),
            "max_attendees": 10,
        }
        payload.update(overrides)
        return payload

    return _payload
