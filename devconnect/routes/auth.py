"""
DevConnect Backend - Authentication Routes
============================================

What:  POST /auth/signup, /auth/login, /auth/logout.
How:   Login issues a JWT and stores it in an httpOnly cookie; every other
       authenticated route reads it back through get_current_user.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from devconnect.config import Settings
from devconnect.database import get_db_session
from devconnect.dependencies import get_app_settings, get_current_user, get_user_service
from devconnect.models.user import User
from devconnect.schemas.common import MessageResponse
from devconnect.schemas.user import LoginRequest, SignupRequest, UserEnvelope, UserPrivate
from devconnect.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def set_auth_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.auth_cookie_name,
        value=token,
        max_age=settings.jwt_expires_minutes * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def clear_auth_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.auth_cookie_name,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


@router.post(
    "/signup",
    response_model=UserEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def signup(
    payload: SignupRequest,
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> UserEnvelope:
    user = await user_service.signup(db, payload)
    return UserEnvelope(
        message="User created successfully",
        user=UserPrivate.model_validate(user),
    )


@router.post("/login", response_model=UserEnvelope, summary="Log in and receive a session cookie")
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    user_service: UserService = Depends(get_user_service),
) -> UserEnvelope:
    user, token = await user_service.login(db, payload.email_id, payload.password)
    set_auth_cookie(response, token, settings)
    return UserEnvelope(message="Login successful", user=UserPrivate.model_validate(user))


@router.post("/logout", response_model=MessageResponse, summary="Clear the session cookie")
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings),
) -> MessageResponse:
    clear_auth_cookie(response, settings)
    logger.info("User %s logged out", user.id)
    return MessageResponse(message="Logout successful")
