"""
DevConnect Backend - Request Dependencies
===========================================

What:  FastAPI dependencies shared by the route modules: settings, services,
       and the authenticated caller.
How:   Everything is read from app.state, populated by create_app(), so tests
       can build an app with their own Settings and Database.

Authentication flow:
    cookie `token` missing              → 401 UnauthenticatedError
    bad signature / expired / malformed → 401 UnauthenticatedError
    userId no longer exists             → 404 NotFoundError
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devconnect.config import Settings
from devconnect.database import get_db_session
from devconnect.exceptions import NotFoundError, UnauthenticatedError
from devconnect.models.user import User
from devconnect.services.connection_service import ConnectionService, connection_service
from devconnect.services.user_service import UserService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_connection_service() -> ConnectionService:
    return connection_service


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    user_service: UserService = Depends(get_user_service),
) -> User:
    """Resolve the caller from the auth cookie."""
    token = request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise UnauthenticatedError("Authentication token is missing")

    user_id = user_service.tokens.decode(token)
    user = await user_service.get(db, user_id)
    if user is None:
        raise NotFoundError("User not found", resource="user", resource_id=str(user_id))

    request.state.user_id = str(user.id)
    return user
