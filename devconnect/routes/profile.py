"""
DevConnect Backend - Profile Routes
=====================================

Self-service endpoints for the authenticated caller:

    GET   /profile/view             → own profile (includes emailId)
    PATCH /profile/update           → partial update of editable fields
    POST  /profile/reset-password   → replace password, end the session
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from devconnect.config import Settings
from devconnect.database import get_db_session
from devconnect.dependencies import get_app_settings, get_current_user, get_user_service
from devconnect.models.user import User
from devconnect.routes.auth import clear_auth_cookie
from devconnect.schemas.common import MessageResponse
from devconnect.schemas.user import (
    ProfileUpdateRequest,
    ResetPasswordRequest,
    UserEnvelope,
    UserPrivate,
)
from devconnect.services.user_service import UserService

router = APIRouter(prefix="/profile", tags=["Profile"])


@router.get("/view", response_model=UserPrivate, summary="View own profile")
async def view_profile(user: User = Depends(get_current_user)) -> UserPrivate:
    return UserPrivate.model_validate(user)


@router.patch("/update", response_model=UserEnvelope, summary="Update own profile")
async def update_profile(
    payload: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> UserEnvelope:
    # Only keys the client actually sent
    changes = payload.model_dump(exclude_unset=True)
    updated = await user_service.update_profile(db, user, changes)
    return UserEnvelope(message="User updated successfully", user=UserPrivate.model_validate(updated))


@router.post("/reset-password", response_model=MessageResponse, summary="Reset own password")
async def reset_password(
    payload: ResetPasswordRequest,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_app_settings),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    await user_service.reset_password(db, user, payload.password)
    clear_auth_cookie(response, settings)
    return MessageResponse(
        message="Password reset successfully. Please login with your new password."
    )
