"""
DevConnect Backend - User Schemas
==================================

What:  Request bodies for signup/login/profile endpoints and the two user
       projections returned by the API.
Who:   Used by routes/auth.py, routes/profile.py and routes/users.py.

Projections:
    UserPublic   → anything another user may see (feed, requests, lookups)
    UserPrivate  → the caller's own profile; adds emailId and timestamps

Neither projection declares `password`, so the hash cannot leak through
serialization even when an ORM User is passed in directly.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import ConfigDict, EmailStr, Field

from devconnect.schemas.common import CamelModel, PaginationMeta


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class SignupRequest(CamelModel):
    first_name: str = Field(min_length=2, max_length=50)
    last_name: str = Field(default="", max_length=50)
    email_id: EmailStr
    password: str = Field(min_length=1, max_length=128)
    age: Optional[int] = None
    gender: Optional[str] = None
    photo_url: Optional[str] = None
    about: Optional[str] = None
    skills: Optional[List[str]] = None


class LoginRequest(CamelModel):
    email_id: EmailStr
    password: str = Field(min_length=1, max_length=128)


class ProfileUpdateRequest(CamelModel):
    """
    Partial profile update. Unknown keys (emailId, password, ...) are
    rejected with 400 instead of being silently dropped.
    """
    model_config = ConfigDict(extra="forbid")

    first_name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(default=None, max_length=50)
    age: Optional[int] = None
    gender: Optional[str] = None
    photo_url: Optional[str] = None
    about: Optional[str] = None
    skills: Optional[List[str]] = None


class ResetPasswordRequest(CamelModel):
    password: str = Field(min_length=1, max_length=128, description="New password")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserPublic(CamelModel):
    id: uuid.UUID
    first_name: str
    last_name: str
    age: int
    gender: str
    photo_url: str
    about: str
    skills: List[str]


class UserPrivate(UserPublic):
    email_id: str
    created_at: datetime
    updated_at: datetime


class UserEnvelope(CamelModel):
    message: str
    user: UserPrivate


class FeedResponse(CamelModel):
    users: List[UserPublic]
    pagination: PaginationMeta
