"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.carpools import event_carpools_router
from api.v1.routes.carpools import router as carpools_router
from api.v1.routes.events import router as events_router
from api.v1.routes.messages import router as messages_router
from api.v1.routes.profiles import router as profiles_router
from api.v1.routes.ratings import router as ratings_router

router = APIRouter()
router.include_router(profiles_router)
router.include_router(events_router)
router.include_router(event_carpools_router)
router.include_router(carpools_router)
router.include_router(ratings_router)
router.include_router(messages_router)
