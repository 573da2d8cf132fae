"""
DevConnect Backend - Test Configuration (conftest.py)
======================================================

Shared pytest fixtures for the entire test suite.

Fixture Hierarchy (all function-scoped):
    test_settings            → Settings for an in-memory SQLite database
    └── database             → Database with all tables created
        ├── db_session       → AsyncSession for service-level tests
        │   └── make_user    → factory: signs up a user through UserService
        └── app              → create_app(test_settings, database)
            └── client       → HTTPX AsyncClient (ASGITransport)
    mock_db_session          → AsyncMock session for error-path tests

Every test gets a fresh in-memory database, so tests never share rows.
"""

import os
from typing import Dict, Tuple
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any devconnect import: devconnect.main builds a module-level
# app from get_settings()
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["JWT_SECRET"] = "test-secret-not-real"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

from devconnect.config import Settings  # noqa: E402
from devconnect.database import Database  # noqa: E402
from devconnect.main import create_app  # noqa: E402
from devconnect.schemas.user import SignupRequest  # noqa: E402
from devconnect.services.user_service import UserService  # noqa: E402

STRONG_PASSWORD = "Str0ng!Pass"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        database_url="sqlite+aiosqlite://",
        jwt_secret="test-secret-not-real",
        bcrypt_rounds=4,
        rate_limit_requests=10000,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def user_service(test_settings) -> UserService:
    return UserService(test_settings)


@pytest_asyncio.fixture
async def make_user(db_session, user_service):
    """
    Factory fixture creating users through the real signup path.

    Usage:
        alice = await make_user("Alice")
        bob = await make_user("Bob", skills=["Go"])
    """
    async def _make(first_name: str = "Ada", email_id: str = None, **extra):
        payload = SignupRequest(
            first_name=first_name,
            last_name=extra.pop("last_name", "Tester"),
            email_id=email_id or f"{first_name.lower()}@devconnect.io",
            password=extra.pop("password", STRONG_PASSWORD),
            **extra,
        )
        return await user_service.signup(db_session, payload)

    return _make


@pytest.fixture
def mock_db_session():
    """AsyncMock standing in for AsyncSession where a real database is not needed."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings, database):
    # ASGITransport does not run the lifespan; tables come from `database`
    return create_app(test_settings, database)


@pytest_asyncio.fixture
async def client(app):
    # raise_app_exceptions=False: the catch-all 500 handler's response is
    # returned instead of the exception propagating into the test
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def token_from(response) -> str:
    """Extract the auth token from a login response's Set-Cookie header."""
    header = response.headers["set-cookie"]
    name, _, value = header.split(";", 1)[0].partition("=")
    assert name == "token"
    return value


@pytest.fixture
def register(client):
    """
    Sign up and log in through the API.

    Usage:
        alice_id, alice = await register("Alice")
        await client.get("/profile/view", headers=alice)

    Returns:
        (user id, headers carrying the auth cookie)
    """
    async def _register(
        first_name: str,
        email_id: str = None,
        password: str = STRONG_PASSWORD,
        **profile,
    ) -> Tuple[str, Dict[str, str]]:
        email_id = email_id or f"{first_name.lower()}@devconnect.io"
        body = {"firstName": first_name, "lastName": "Tester", "emailId": email_id, "password": password}
        body.update(profile)
        signup = await client.post("/auth/signup", json=body)
        assert signup.status_code == 201, signup.text

        login = await client.post("/auth/login", json={"emailId": email_id, "password": password})
        assert login.status_code == 200, login.text
        token = token_from(login)
        # Callers authenticate explicitly through their own headers
        client.cookies.clear()
        return signup.json()["user"]["id"], {"Cookie": f"token={token}"}

    return _register
