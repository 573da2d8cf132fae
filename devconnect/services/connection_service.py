"""
DevConnect Backend - Connection Request Workflow
==================================================

What:  Creates, de-duplicates and transitions connection requests, and answers
       the "received" and "connections" queries.
Why:   All rules of the connect / accept / reject workflow live here, away
       from HTTP concerns.
How:   Stateless service; every method receives the request's AsyncSession.
       Uniqueness and one-shot review are enforced by the database (unique
       pair_key, conditional UPDATE), not by read-then-write checks alone.
Who:   Called by routes/requests.py and routes/users.py.

Workflow:
    ┌────────────┐  send(interested)   ┌────────────┐  review(accepted)  ┌──────────┐
    │  (no edge) │───────────────────▶│ interested │──────────────────▶│ accepted │
    └────────────┘                     └────────────┘                    └──────────┘
          │        send(ignore)              │       review(rejected)   ┌──────────┐
          └──────────────────▶ ignore        └────────────────────────▶│ rejected │
                                                                        └──────────┘
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Tuple

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devconnect.exceptions import (
    BadRequestError,
    ConflictError,
    DatabaseError,
    DevConnectError,
    NotFoundError,
)
from devconnect.models.connection_request import (
    CREATE_STATUSES,
    REVIEW_STATUSES,
    ConnectionRequest,
    ConnectionStatus,
    make_pair_key,
)
from devconnect.models.user import User
from devconnect.validators import parse_user_id

logger = logging.getLogger(__name__)

_STATUS_MESSAGES = {
    ConnectionStatus.INTERESTED: "{actor} is interested in {target}",
    ConnectionStatus.IGNORE: "{actor} ignored {target}",
    ConnectionStatus.ACCEPTED: "{actor} accepted the connection request from {target}",
    ConnectionStatus.REJECTED: "{actor} rejected the connection request from {target}",
}
DEFAULT_STATUS_MESSAGE = "Connection request updated"


def status_message(status: str, actor: User, target: User) -> str:
    """Human-readable outcome for a send/review, keyed by the resulting status."""
    try:
        template = _STATUS_MESSAGES[ConnectionStatus(status)]
    except ValueError:
        return DEFAULT_STATUS_MESSAGE
    return template.format(actor=actor.first_name, target=target.first_name)


def _parse_status(value: str) -> ConnectionStatus:
    try:
        return ConnectionStatus((value or "").strip().lower())
    except ValueError:
        raise BadRequestError(
            f"Invalid status: {value}",
            context={"allowed_statuses": [s.value for s in ConnectionStatus]},
        )


def parse_create_status(value: str) -> ConnectionStatus:
    """Statuses a sender may open an edge with: interested or ignore."""
    status = _parse_status(value)
    if status in REVIEW_STATUSES:
        raise BadRequestError(
            f"Status '{status.value}' can only be set by reviewing a request",
            context={"allowed_statuses": sorted(s.value for s in CREATE_STATUSES)},
        )
    return status


def parse_review_status(value: str) -> ConnectionStatus:
    """Decisions a recipient may take: accepted or rejected."""
    status = _parse_status(value)
    if status not in REVIEW_STATUSES:
        raise BadRequestError(
            f"Invalid review status: {status.value}",
            context={"allowed_statuses": sorted(s.value for s in REVIEW_STATUSES)},
        )
    return status


class ConnectionService:
    """
    Business logic for connection requests.

    Responsibilities:
        - create_request(): open a new edge (interested | ignore)
        - review_request(): one-shot transition interested → accepted | rejected
        - received_requests(): pending requests addressed to a user
        - connections(): users on the other end of accepted edges

    Error Handling Strategy:
        Domain failures raise DevConnectError subclasses and propagate as-is.
        Unexpected SQLAlchemy errors are logged and wrapped in DatabaseError.
    """

    async def _get_user(self, db: AsyncSession, user_id: uuid.UUID) -> User:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def create_request(
        self,
        db: AsyncSession,
        actor: User,
        target_id: str,
        status: str,
    ) -> Tuple[ConnectionRequest, str]:
        """
        Open a connection request from `actor` to `target_id`.

        Checks, in order:
            1. status is interested or ignore          → BadRequestError
            2. target_id is a well-formed UUID          → BadRequestError
            3. target is not the actor                  → BadRequestError
            4. target exists                            → NotFoundError
            5. no edge exists for the unordered pair    → ConflictError

        A concurrent insert for the same pair that slips past step 5 trips the
        unique pair_key constraint on flush and is reported as ConflictError.

        Returns:
            (persisted edge, status message)
        """
        initial_status = parse_create_status(status)
        to_user_id = parse_user_id(target_id, label="Target user ID")

        if to_user_id == actor.id:
            raise BadRequestError("You cannot send a connection request to yourself")

        # Captured up front: a failed flush expires `actor`
        pair_context = {"from_user_id": str(actor.id), "to_user_id": str(to_user_id)}

        try:
            target = await self._get_user(db, to_user_id)
            if target is None:
                raise NotFoundError(
                    "User to connect not found",
                    resource="user",
                    resource_id=str(to_user_id),
                )

            pair_key = make_pair_key(actor.id, to_user_id)
            existing = await db.execute(
                select(ConnectionRequest.id).where(ConnectionRequest.pair_key == pair_key)
            )
            if existing.scalar_one_or_none() is not None:
                raise ConflictError(
                    "Connection request already exists",
                    context=pair_context,
                )

            connection = ConnectionRequest(
                from_user_id=actor.id,
                to_user_id=to_user_id,
                pair_key=pair_key,
                status=initial_status.value,
            )
            db.add(connection)
            try:
                await db.flush()
            except IntegrityError:
                logger.info("Concurrent connection request for pair %s", pair_key)
                raise ConflictError(
                    "Connection request already exists",
                    context=pair_context,
                )

            logger.info(
                "Connection request %s created: %s -> %s (%s)",
                connection.id, actor.id, to_user_id, initial_status.value,
            )
            return connection, status_message(initial_status.value, actor, target)

        except DevConnectError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error creating connection request: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not send the connection request. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def review_request(
        self,
        db: AsyncSession,
        reviewer: User,
        requester_id: str,
        decision: str,
    ) -> Tuple[ConnectionRequest, str]:
        """
        Accept or reject the pending request sent by `requester_id` to `reviewer`.

        The transition is a single conditional UPDATE:

            UPDATE connection_requests SET status = :decision
            WHERE from_user_id = :requester AND to_user_id = :reviewer
              AND status = 'interested'

        so a second (or concurrent) review matches zero rows and fails with
        NotFoundError. Requests in `ignore` state are never reviewable.
        """
        new_status = parse_review_status(decision)
        from_user_id = parse_user_id(requester_id, label="Target user ID")

        try:
            requester = await self._get_user(db, from_user_id)
            if requester is None:
                raise NotFoundError(
                    "User not found",
                    resource="user",
                    resource_id=str(from_user_id),
                )

            result = await db.execute(
                update(ConnectionRequest)
                .where(
                    ConnectionRequest.from_user_id == from_user_id,
                    ConnectionRequest.to_user_id == reviewer.id,
                    ConnectionRequest.status == ConnectionStatus.INTERESTED.value,
                )
                .values(status=new_status.value, updated_at=datetime.now(timezone.utc))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError(
                    "Connection request not found",
                    resource="connection_request",
                    context={"from_user_id": str(from_user_id), "to_user_id": str(reviewer.id)},
                )

            refreshed = await db.execute(
                select(ConnectionRequest)
                .where(
                    ConnectionRequest.from_user_id == from_user_id,
                    ConnectionRequest.to_user_id == reviewer.id,
                )
                .execution_options(populate_existing=True)
            )
            connection = refreshed.scalar_one()

            logger.info(
                "Connection request %s reviewed by %s: %s",
                connection.id, reviewer.id, new_status.value,
            )
            return connection, status_message(new_status.value, reviewer, requester)

        except DevConnectError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error reviewing connection request: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not review the connection request. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def received_requests(
        self, db: AsyncSession, user: User
    ) -> List[ConnectionRequest]:
        """
        Pending requests addressed to `user`, newest first.

        Query plan:
            WHERE to_user_id = :user AND status = 'interested'
            → idx_connection_requests_to_status
        Senders are loaded eagerly (selectinload) for the public projection.
        """
        try:
            result = await db.execute(
                select(ConnectionRequest)
                .where(
                    ConnectionRequest.to_user_id == user.id,
                    ConnectionRequest.status == ConnectionStatus.INTERESTED.value,
                )
                .options(selectinload(ConnectionRequest.from_user))
                .order_by(ConnectionRequest.created_at.desc(), ConnectionRequest.id)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing received requests: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve connection requests. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def connections(self, db: AsyncSession, user: User) -> List[User]:
        """Users on the other end of every accepted edge touching `user`."""
        try:
            result = await db.execute(
                select(ConnectionRequest)
                .where(
                    ConnectionRequest.status == ConnectionStatus.ACCEPTED.value,
                    or_(
                        ConnectionRequest.from_user_id == user.id,
                        ConnectionRequest.to_user_id == user.id,
                    ),
                )
                .options(
                    selectinload(ConnectionRequest.from_user),
                    selectinload(ConnectionRequest.to_user),
                )
                .order_by(ConnectionRequest.updated_at.desc(), ConnectionRequest.id)
            )
            return [edge.other_user(user.id) for edge in result.scalars().all()]
        except SQLAlchemyError as e:
            logger.error("Database error listing connections: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve connections. Please try again.",
                context={"error_type": type(e).__name__},
            )


# ── Singleton Instance ────────────────────────────────────────────────────
connection_service = ConnectionService()
