from fastapi import APIRouter

from .arena import router as arena_router
from .health import router as health_router
from .history import router as history_router
from .preferences import router as preferences_router


api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(arena_router)
api_router.include_router(history_router)
api_router.include_router(preferences_router)
