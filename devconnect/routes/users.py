"""
DevConnect Backend - User Routes
==================================

What:  Read-only views over users and the caller's connection graph.

    GET /user/feed?page=&limit=         → paginated public profiles
    GET /user/requests/received         → pending requests sent to the caller
    GET /user/requests/connections      → users the caller is connected to
    GET /user?emailId=                  → lookup by email
    GET /user/{userId}                  → lookup by id

Fixed paths are registered before /{user_id} so "feed" and "requests" are
never parsed as identifiers.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from devconnect.database import get_db_session
from devconnect.dependencies import get_connection_service, get_current_user, get_user_service
from devconnect.models.user import User
from devconnect.schemas.connection_request import (
    ConnectionsResponse,
    ReceivedRequest,
    ReceivedRequestsResponse,
)
from devconnect.schemas.user import FeedResponse, UserPublic
from devconnect.services.connection_service import ConnectionService
from devconnect.services.user_service import UserService

router = APIRouter(prefix="/user", tags=["Users"])


@router.get("/feed", response_model=FeedResponse, summary="Paginated user feed")
async def feed(
    page: int = Query(default=1, description="Page number (>= 1)"),
    limit: int = Query(default=10, description="Users per page (1-100)"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> FeedResponse:
    users, pagination = await user_service.feed(db, page=page, limit=limit)
    return FeedResponse(
        users=[UserPublic.model_validate(u) for u in users],
        pagination=pagination,
    )


@router.get(
    "/requests/received",
    response_model=ReceivedRequestsResponse,
    summary="Pending requests sent to the caller",
)
async def received_requests(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: ConnectionService = Depends(get_connection_service),
) -> ReceivedRequestsResponse:
    requests = await service.received_requests(db, user)
    return ReceivedRequestsResponse(
        message="Connection requests retrieved successfully",
        received_requests=[ReceivedRequest.model_validate(r) for r in requests],
    )


@router.get(
    "/requests/connections",
    response_model=ConnectionsResponse,
    summary="Users the caller is connected to",
)
async def connections(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionsResponse:
    users = await service.connections(db, user)
    return ConnectionsResponse(
        message="Connections retrieved successfully",
        data=[UserPublic.model_validate(u) for u in users],
    )


@router.get("", response_model=UserPublic, summary="Look up a user by email")
async def get_user_by_email(
    email_id: Optional[str] = Query(default=None, alias="emailId"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> UserPublic:
    found = await user_service.get_by_email(db, email_id)
    return UserPublic.model_validate(found)


@router.get("/{user_id}", response_model=UserPublic, summary="Look up a user by id")
async def get_user(
    user_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    user_service: UserService = Depends(get_user_service),
) -> UserPublic:
    found = await user_service.get_by_id(db, user_id)
    return UserPublic.model_validate(found)
