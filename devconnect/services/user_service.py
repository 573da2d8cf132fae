"""
DevConnect Backend - User Service
===================================

What:  Account lifecycle (signup, login, password reset), profile updates and
       the read-side user queries (lookup by id/email, paginated feed).
Why:   Keeps credential handling and profile rules out of the route handlers.
How:   Holds a PasswordHasher and TokenCodec built from Settings; every method
       receives the request's AsyncSession. Changes are flushed here and
       committed by get_db_session.
Who:   Built once per application by create_app() (app.state.user_service).

Feed ordering:
    ORDER BY created_at DESC, id   → stable pages for equal timestamps
"""

import logging
import math
import uuid
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from devconnect.config import Settings
from devconnect.exceptions import (
    BadRequestError,
    ConflictError,
    DatabaseError,
    DevConnectError,
    NotFoundError,
)
from devconnect.models.user import User
from devconnect.schemas.common import PaginationMeta
from devconnect.schemas.user import SignupRequest
from devconnect.security import PasswordHasher, TokenCodec
from devconnect.validators import (
    clean_profile_fields,
    normalize_email,
    parse_user_id,
    validate_name,
    validate_pagination,
    validate_password,
)

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for user accounts and profiles.

    Responsibilities:
        - signup() / login(): credential handling, token issue
        - update_profile() / reset_password(): self-service mutations
        - get(), get_by_id(), get_by_email(), feed(): read queries
    """

    def __init__(self, settings: Settings):
        self.hasher = PasswordHasher(settings)
        self.tokens = TokenCodec(settings)

    # ── Account lifecycle ─────────────────────────────────────────────────

    async def signup(self, db: AsyncSession, payload: SignupRequest) -> User:
        """
        Register a new account.

        Raises:
            ValidationError: name/password/profile rules violated (→ 400)
            ConflictError:   email already registered, any casing (→ 409)
        """
        first_name = validate_name(payload.first_name, field="first_name")
        last_name = validate_name(payload.last_name, field="last_name", required=False)
        validate_password(payload.password)
        email = normalize_email(payload.email_id)

        extras = {
            key: getattr(payload, key)
            for key in ("age", "gender", "photo_url", "about", "skills")
            if getattr(payload, key) is not None
        }
        profile = clean_profile_fields(extras)

        try:
            if await self._find_by_email(db, email) is not None:
                raise ConflictError("Email already registered", context={"email_id": email})

            user = User(
                first_name=first_name,
                last_name=last_name,
                email_id=email,
                password=self.hasher.hash(payload.password),
                **profile,
            )
            db.add(user)
            try:
                await db.flush()
            except IntegrityError:
                raise ConflictError("Email already registered", context={"email_id": email})

            # Populate server-side defaults (timestamps) for the response
            await db.refresh(user)
            logger.info("User %s signed up", user.id)
            return user

        except DevConnectError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database error during signup: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the account. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def login(self, db: AsyncSession, email_id: str, password: str) -> Tuple[User, str]:
        """
        Verify credentials and issue a session token.

        Returns:
            (user, token); the token goes into the auth cookie
        """
        user = await self._find_by_email(db, normalize_email(email_id))
        if user is None or not self.hasher.verify(password, user.password):
            raise NotFoundError("Invalid email or password", resource="user")

        logger.info("User %s logged in", user.id)
        return user, self.tokens.issue(user.id)

    async def reset_password(self, db: AsyncSession, user: User, new_password: str) -> None:
        validate_password(new_password)
        user.password = self.hasher.hash(new_password)
        await db.flush()
        logger.info("Password reset for user %s", user.id)

    async def update_profile(self, db: AsyncSession, user: User, changes: Dict[str, Any]) -> User:
        """
        Apply a partial profile update.

        `changes` holds only the keys the client sent (snake_case). Unknown
        keys, an empty update and rule violations are all rejected with 400.
        """
        if not changes:
            raise BadRequestError("No fields provided for update")

        cleaned = clean_profile_fields(changes)
        if not cleaned:
            raise BadRequestError("No fields provided for update")

        for key, value in cleaned.items():
            setattr(user, key, value)

        try:
            await db.flush()
            await db.refresh(user)
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user.id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the profile. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("User %s updated fields: %s", user.id, sorted(cleaned))
        return user

    # ── Queries ───────────────────────────────────────────────────────────

    async def _find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email_id == email))
        return result.scalar_one_or_none()

    async def get(self, db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
        result = await db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_id(self, db: AsyncSession, raw_id: str) -> User:
        user_id = parse_user_id(raw_id)
        user = await self.get(db, user_id)
        if user is None:
            raise NotFoundError("User not found", resource="user", resource_id=str(user_id))
        return user

    async def get_by_email(self, db: AsyncSession, email_id: Optional[str]) -> User:
        if not email_id or not email_id.strip():
            raise BadRequestError("Email ID is required")
        user = await self._find_by_email(db, normalize_email(email_id))
        if user is None:
            raise NotFoundError("User not found", resource="user")
        return user

    async def feed(
        self, db: AsyncSession, page: int = 1, limit: int = 10
    ) -> Tuple[List[User], PaginationMeta]:
        """
        One page of all users, newest first.

        Query plan:
            SELECT count(*) FROM users
            SELECT * FROM users ORDER BY created_at DESC, id
                LIMIT :limit OFFSET (:page - 1) * :limit
            → idx_users_created_at

        Raises:
            BadRequestError: page < 1 or limit outside 1-100
        """
        validate_pagination(page, limit)

        try:
            total = (await db.execute(select(func.count()).select_from(User))).scalar_one()
            result = await db.execute(
                select(User)
                .order_by(User.created_at.desc(), User.id)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            users = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error building feed: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve users. Please try again.",
                context={"error_type": type(e).__name__},
            )

        total_pages = math.ceil(total / limit)
        pagination = PaginationMeta(
            current_page=page,
            total_pages=total_pages,
            total_users=total,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
        return users, pagination
