from fastapi import APIRouter

from authgate.api.auth import router as auth_router
from authgate.api.health import router as health_router
from authgate.api.protected import router as protected_router

api_router = APIRouter()

# Include sub-routers
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router)
api_router.include_router(protected_router)
