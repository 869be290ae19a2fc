"""
FastAPI dependency injection utilities.

Provides reusable dependencies for settings, database sessions and the
services built on top of them. One explicit provider per service; there is
no type-keyed service lookup.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings, get_settings
from app.core.database import get_session
from app.services.user_service import UserService

SettingsDep = Annotated[Settings, Depends(get_settings)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_user_service(session: SessionDep, settings: SettingsDep) -> UserService:
    """
    Build the user listing service for one request.

    Usage:
        @router.get("/users")
        async def list_users(user_service: UserServiceDep): ...
    """
    return UserService(session, settings)


UserServiceDep = Annotated[UserService, Depends(get_user_service)]
