"""
DevConnect Backend - Connection Request Schemas
================================================

Response envelopes for the /requests and /user/requests endpoints. Request
parameters (status, user id) arrive as path segments, so there are no
request bodies here.
"""

import uuid
from datetime import datetime
from typing import List

from devconnect.schemas.common import CamelModel
from devconnect.schemas.user import UserPublic


class ConnectionRequestOut(CamelModel):
    id: uuid.UUID
    from_user_id: uuid.UUID
    to_user_id: uuid.UUID
    status: str
    created_at: datetime
    updated_at: datetime


class ConnectionRequestEnvelope(CamelModel):
    """Returned by send and review: `{message, connectionRequest}`."""
    message: str
    connection_request: ConnectionRequestOut


class ReceivedRequest(ConnectionRequestOut):
    """A pending request together with its sender's public profile."""
    from_user: UserPublic


class ReceivedRequestsResponse(CamelModel):
    message: str
    received_requests: List[ReceivedRequest]


class ConnectionsResponse(CamelModel):
    message: str
    data: List[UserPublic]
