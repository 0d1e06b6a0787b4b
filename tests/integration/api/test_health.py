"""Tests for health check endpoints."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.session import get_async_session


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_returns_200(self, client: AsyncClient) -> None:
        """Test that health endpoint returns 200 OK."""
        response = await client.get("/health")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_health_returns_correct_structure(self, client: AsyncClient) -> None:
        """Test that health endpoint returns expected structure."""
        response = await client.get("/health")
        data = response.json()

        assert "status" in data
        assert "version" in data
        assert "timestamp" in data
        assert "environment" in data

    @pytest.mark.asyncio
    async def test_health_status_is_healthy(self, client: AsyncClient) -> None:
        """Test that health status is 'healthy'."""
        response = await client.get("/health")
        data = response.json()

        assert data["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_health_version_format(self, client: AsyncClient) -> None:
        """Test that version has expected format."""
        response = await client.get("/health")
        data = response.json()

        # Check version follows semver pattern
        assert data["version"] == "1.0.0"


class TestDetailedHealth:
    """Tests for the readiness check."""

    @pytest.fixture
    def ready_app(
        self, app: FastAPI, session_factory: async_sessionmaker[AsyncSession]
    ) -> FastAPI:
        async def override_session() -> AsyncGenerator[AsyncSession, None]:
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_async_session] = override_session
        return app

    @pytest.mark.asyncio
    async def test_reports_database_and_realtime(
        self, ready_app: FastAPI, client: AsyncClient
    ) -> None:
        response = await client.get("/health/detailed")
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "healthy"
        assert data["database"] == "healthy"
        assert data["realtime"] == "enabled (0 subscribers)"
