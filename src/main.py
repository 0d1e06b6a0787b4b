"""Main FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from api.exception_handlers import setup_exception_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.middleware.request_id import RequestIDMiddleware
from api.middleware.security import SecurityHeadersMiddleware
from api.routes.health import API_VERSION
from api.routes.health import router as health_router
from api.v1 import router as v1_router
from core.config import settings
from core.logging import setup_logging
from core.rate_limit import limiter, rate_limit_exceeded_handler
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.database.session import engine
from infrastructure.realtime.broker import create_broker

logger = structlog.get_logger()

# Initialize structured logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup/shutdown tasks."""
    logger.info(
        "app_started",
        environment=settings.app_env,
        realtime_enabled=settings.realtime_enabled,
    )
    yield
    await app.state.realtime_broker.aclose()
    await engine.dispose()
    logger.info("app_stopped")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        title=settings.app_name,
        description=(
            "## Campus Events and Companionship\n\n"
            "TwoGether helps students find people to go places with: host or "
            "join campus events, share rides, chat with other attendees and "
            "rate each other afterwards.\n\n"
            "### Features\n"
            "- **Events**: Discover, host and join events with capacity limits\n"
            "- **Event chat**: Per-event chat with a realtime WebSocket feed\n"
            "- **Carpools**: Offer rides and request seats\n"
            "- **Ratings**: Rate people you met at a shared event\n\n"
            "### Authentication\n"
            "All endpoints (except `/health`) require a valid JWT token "
            "in the Authorization header:\n"
            "```\nAuthorization: Bearer <your_token>\n```\n"
            "The realtime feed takes the same token as a `token` query "
            "parameter.\n\n"
            "### Rate Limits\n"
            "- GET endpoints: 60 requests/minute\n"
            "- Chat posts: 30 requests/minute\n"
            "- Other POST/PATCH/DELETE: 20 requests/minute"
        ),
        version=API_VERSION,
        debug=settings.debug,
        contact={
            "name": "TwoGether Support",
        },
        license_info={
            "name": "MIT",
        },
        openapi_tags=[
            {
                "name": "health",
                "description": "Health check endpoints",
            },
            {
                "name": "profiles",
                "description": "Student profiles and public ratings",
            },
            {
                "name": "events",
                "description": "Event discovery, hosting and membership",
            },
            {
                "name": "carpools",
                "description": "Rides to events and seat requests",
            },
            {
                "name": "ratings",
                "description": "Post-event ratings",
            },
            {
                "name": "messages",
                "description": "Event chat, direct threads and the realtime feed",
            },
        ],
    )

    # Shared per-process collaborators, resolved by dependencies
    app.state.realtime_broker = create_broker(settings)
    app.state.auth_provider = JWTAuthProvider()

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Security & tracking middleware (LIFO order - last added = outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # GZip compression for responses > 1KB
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Setup exception handlers
    setup_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(v1_router, prefix="/api/v1")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )
