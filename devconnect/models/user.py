"""
DevConnect Backend - User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.
Why:   Source of truth for account existence, credentials and profile data.
How:   Inherits from Base; Alembic migration 001 mirrors this definition.

Table Design Rationale:
    - UUID primary key: Non-sequential (cannot enumerate users), and parsed
      strictly at the API boundary so malformed ids fail with 400
    - email_id: Stored lower-cased; the unique index makes it case-insensitive
    - password: bcrypt hash only; no schema ever serializes this column
    - skills: JSON array, normalized (trimmed, de-duplicated) before insert
    - created_at index: Feed lists users newest first
"""

import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import JSON, DateTime, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from devconnect.database import Base

DEFAULT_PHOTO_URL = "https://freesvg.org/img/abstract-user-flat-4.png"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    A registered account.

    Lifecycle:
        1. Created on signup (password hashed, skills normalized)
        2. Profile fields mutated by PATCH /profile/update
        3. Password replaced by POST /profile/reset-password
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False, default="")

    email_id: Mapped[str] = mapped_column(
        String(320),
        nullable=False,
        unique=True,
        comment="Lower-cased, trimmed email address",
    )

    password: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash, never returned by the API",
    )

    age: Mapped[int] = mapped_column(Integer, nullable=False, default=18)
    gender: Mapped[str] = mapped_column(String(1), nullable=False, default="M")
    photo_url: Mapped[str] = mapped_column(
        String(2048), nullable=False, default=DEFAULT_PHOTO_URL
    )
    about: Mapped[str] = mapped_column(Text, nullable=False, default="")
    skills: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_users_created_at", created_at.desc()),
        Index("idx_users_name", "first_name", "last_name"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email_id='{self.email_id}')>"
