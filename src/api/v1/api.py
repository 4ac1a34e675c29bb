from fastapi import APIRouter

from .blueprints import router as blueprints_router
from .chat import router as chat_router
from .devices import router as devices_router
from .health import router as health_router
from .usage import router as usage_router


# Authentication is declared per route: generation accepts anonymous
# callers, device checks run before signup, vault and usage require a user.
api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(blueprints_router)
api_router.include_router(usage_router)
api_router.include_router(devices_router)
api_router.include_router(chat_router)
