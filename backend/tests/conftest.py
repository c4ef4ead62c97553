"""
Junkick Backend — Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Service and API tests run against a real (throwaway) SQLite database
       so the SQL behind capacity guards, tag filters and cascades is
       exercised, not mocked.
How:   Every test gets its own database file under pytest's tmp_path, with
       the schema created from the ORM metadata.

Fixture Hierarchy (all function-scoped):
    ├── database:        Database bound to a fresh sqlite+aiosqlite file
    │   ├── db_session:  One transactional session (commits on teardown)
    │   └── app:         FastAPI app with the database injected
    │       └── test_client: HTTPX AsyncClient over ASGITransport
    ├── make_user:       Creates a user inside a given session
    ├── api_user:        Commits a user and returns (user, auth headers)
    └── mock_db_session: AsyncMock session for isolated unit tests
"""

import os
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

# Override settings BEFORE any junkick import: the settings singleton is
# read once at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["ADMIN_BYPASS_OWNERSHIP"] = "true"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from junkick.database import Database
from junkick.enums import UserRole
from junkick.models.user import User
from junkick.services.security import create_access_token, pwd_context

TEST_PASSWORD = "secret123"

# Hashing once keeps user creation cheap; every test user shares the password
_TEST_PASSWORD_HASH = pwd_context.hash(TEST_PASSWORD)


@pytest_asyncio.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'junkick_test.db'}")
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session() as session:
        yield session


@pytest.fixture
def make_user():
    """
    Factory creating a flushed user in the given session.

    Usage:
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
    """

    async def create(session, role=UserRole.DEVELOPER, name=None, email=None, legacy_id=None):
        suffix = uuid4().hex[:8]
        user = User(
            name=name or f"User {suffix}",
            email=email or f"user-{suffix}@example.com",
            password_hash=_TEST_PASSWORD_HASH,
            role=role,
            skills=[],
            legacy_id=legacy_id,
        )
        session.add(user)
        await session.flush()
        return user

    return create


@pytest.fixture
def auth_headers():
    def build(user: User) -> dict:
        token = create_access_token(user.id, user.email, user.role)
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture
def api_user(database, make_user, auth_headers):
    """
    Factory committing a user and returning (user, headers) for API calls.

    Usage:
        owner, headers = await api_user(UserRole.TEAM_LEAD)
    """

    async def create(role=UserRole.DEVELOPER, **kwargs):
        async with database.session() as session:
            user = await make_user(session, role=role, **kwargs)
        return user, auth_headers(user)

    return create


@pytest.fixture
def app(database):
    from junkick.main import create_app

    # A fresh app per test: the rate limiter keeps per-instance state
    return create_app(database=database)


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app.

    ASGITransport does not run the lifespan; the database is already on
    app.state from create_app(database=...).
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def mock_db_session():
    """
    A mock AsyncSession for tests that only check control flow.

    Usage:
        mock_db_session.get.return_value = None
        with pytest.raises(NotFoundError):
            await user_service.get_user(mock_db_session, str(uuid4()))
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session
