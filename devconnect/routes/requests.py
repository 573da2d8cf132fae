"""
DevConnect Backend - Connection Request Routes
================================================

What:  POST /requests/send/{status}/{toUserId}    (interested | ignore)
       POST /requests/review/{status}/{toUserId}  (accepted | rejected)
How:   Path segments go to ConnectionService unparsed; it owns status and
       identifier validation so the error order stays in one place.

For review, {toUserId} names the user who SENT the pending request.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devconnect.database import get_db_session
from devconnect.dependencies import get_connection_service, get_current_user
from devconnect.models.user import User
from devconnect.schemas.connection_request import (
    ConnectionRequestEnvelope,
    ConnectionRequestOut,
)
from devconnect.services.connection_service import ConnectionService

router = APIRouter(prefix="/requests", tags=["Connection Requests"])


@router.post(
    "/send/{status}/{to_user_id}",
    response_model=ConnectionRequestEnvelope,
    status_code=201,
    summary="Send a connection request (interested) or pass on a user (ignore)",
)
async def send_request(
    status: str,
    to_user_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionRequestEnvelope:
    connection, message = await service.create_request(db, user, to_user_id, status)
    return ConnectionRequestEnvelope(
        message=message,
        connection_request=ConnectionRequestOut.model_validate(connection),
    )


@router.post(
    "/review/{status}/{to_user_id}",
    response_model=ConnectionRequestEnvelope,
    summary="Accept or reject a pending request",
)
async def review_request(
    status: str,
    to_user_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    service: ConnectionService = Depends(get_connection_service),
) -> ConnectionRequestEnvelope:
    connection, message = await service.review_request(db, user, to_user_id, status)
    return ConnectionRequestEnvelope(
        message=message,
        connection_request=ConnectionRequestOut.model_validate(connection),
    )
