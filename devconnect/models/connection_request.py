"""
DevConnect Backend - ConnectionRequest SQLAlchemy Model
=========================================================

What:  ORM model for the `connection_requests` table: a directed edge
       from one user to another carrying a status label.
Why:   The connect / accept / reject workflow reads and writes only this table
       (plus existence checks against `users`).

State machine for `status`:

                create(interested|ignore)
      [none] ─────────────────────────────▶ interested | ignore
                                                 │ review(accepted|rejected)
                                                 │ only while status == interested
                                                 ▼
                                          accepted | rejected   (terminal)
      ignore  (terminal)

Constraints:
    - ck_connection_requests_not_self: from_user_id <> to_user_id
    - uq_connection_requests_pair:     one edge per unordered pair, enforced on
      pair_key = "<smaller uuid>:<larger uuid>" so (A,B) and (B,A) collide
    - ck_connection_requests_status:   status in the closed label set
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from devconnect.database import Base
from devconnect.models.user import User


class ConnectionStatus(str, Enum):
    IGNORE = "ignore"
    INTERESTED = "interested"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# Statuses a sender may open an edge with
CREATE_STATUSES = frozenset({ConnectionStatus.INTERESTED, ConnectionStatus.IGNORE})

# Statuses a recipient may move an interested edge to
REVIEW_STATUSES = frozenset({ConnectionStatus.ACCEPTED, ConnectionStatus.REJECTED})


def make_pair_key(first: uuid.UUID, second: uuid.UUID) -> str:
    """Order-independent key for the unordered pair {first, second}."""
    low, high = sorted((str(first), str(second)))
    return f"{low}:{high}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


_STATUS_VALUES = ", ".join(f"'{s.value}'" for s in ConnectionStatus)


class ConnectionRequest(Base):
    """A directed connection request between two users."""

    __tablename__ = "connection_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    from_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    to_user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    pair_key: Mapped[str] = mapped_column(
        String(73),
        nullable=False,
        comment="Canonical unordered pair key: min(from,to):max(from,to)",
    )

    status: Mapped[str] = mapped_column(String(20), nullable=False)

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

    from_user: Mapped[User] = relationship(foreign_keys=[from_user_id], lazy="raise")
    to_user: Mapped[User] = relationship(foreign_keys=[to_user_id], lazy="raise")

    __table_args__ = (
        UniqueConstraint("pair_key", name="uq_connection_requests_pair"),
        CheckConstraint("from_user_id <> to_user_id", name="ck_connection_requests_not_self"),
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="ck_connection_requests_status"),
        Index("idx_connection_requests_to_status", "to_user_id", "status"),
        Index("idx_connection_requests_from_status", "from_user_id", "status"),
    )

    def other_user(self, user_id: uuid.UUID) -> User:
        """The endpoint of this edge that is not `user_id` (both sides must be loaded)."""
        return self.to_user if self.from_user_id == user_id else self.from_user

    def __repr__(self) -> str:
        return (
            f"<ConnectionRequest(id={self.id}, from={self.from_user_id}, "
            f"to={self.to_user_id}, status='{self.status}')>"
        )
