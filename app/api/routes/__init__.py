"""API routes package."""

from fastapi import APIRouter

from app.api.routes.health import router as health_router
from app.api.routes.users import router as users_router

# Create API router with all sub-routers
api_router = APIRouter()

api_router.include_router(health_router)
api_router.include_router(users_router)


__all__ = [
    "api_router",
    "health_router",
    "users_router",
]
