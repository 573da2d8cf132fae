"""
DevConnect Backend - Password Hashing & Session Tokens
========================================================

What:  bcrypt password hashing (passlib) and signed session tokens (python-jose).
Why:   Both primitives are configured from Settings (cost factor, secret,
       lifetime) and injected where needed instead of living as globals.

Token format:
    HS256 JWT with claims {"userId": "<uuid>", "exp": <unix time>}, carried
    in the `token` cookie.
"""

import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from devconnect.config import Settings
from devconnect.exceptions import UnauthenticatedError


class PasswordHasher:
    """bcrypt hashing with the configured cost factor."""

    def __init__(self, settings: Settings):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=settings.bcrypt_rounds,
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str) -> bool:
        try:
            return self._context.verify(password, hashed)
        except (ValueError, TypeError):
            # Malformed stored hash: treat as a failed match
            return False


class TokenCodec:
    """Issues and verifies session tokens."""

    def __init__(self, settings: Settings):
        self._secret = settings.jwt_secret
        self._algorithm = settings.jwt_algorithm
        self.lifetime = timedelta(minutes=settings.jwt_expires_minutes)

    def issue(self, user_id: uuid.UUID) -> str:
        expire = datetime.now(timezone.utc) + self.lifetime
        return jwt.encode(
            {"userId": str(user_id), "exp": expire},
            self._secret,
            algorithm=self._algorithm,
        )

    def decode(self, token: str) -> uuid.UUID:
        """
        Return the user id carried by `token`.

        Raises:
            UnauthenticatedError: bad signature, expired, or no usable userId
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except JWTError:
            raise UnauthenticatedError("Invalid or expired authentication token")

        raw_id = payload.get("userId")
        if not raw_id:
            raise UnauthenticatedError("Invalid token")
        try:
            return uuid.UUID(str(raw_id))
        except ValueError:
            raise UnauthenticatedError("Invalid token")
