"""
SIA API: Test Configuration (conftest.py)
=========================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test that touches storage gets its own SQLite file under
       pytest's tmp_path (aiosqlite driver), so tests never share rows.

Fixture Hierarchy (all function-scoped):
    test_settings ─┬─ app ─┬─ test_client ── auth_headers
                   │       └─ db_session
                   ├─ hasher
                   └─ issuer
    mock_db_session: AsyncMock standing in for AsyncSession
"""

import os
import tempfile
from typing import AsyncGenerator, Dict
from unittest.mock import AsyncMock, MagicMock

# Override settings BEFORE any sia_api import: `sia_api.main` builds a
# default app from the environment at import time.
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='sia_test_')}/default.db"
)
os.environ["JWT_SECRET_KEY"] = "test-secret-key-0123456789abcdefghijklmnop"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["BCRYPT_ROUNDS"] = "4"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from sia_api.config import Settings  # noqa: E402
from sia_api.main import create_app  # noqa: E402
from sia_api.security import PasswordHasher, TokenIssuer  # noqa: E402

TEST_SECRET = "test-secret-key-0123456789abcdefghijklmnop"
TEST_PASSWORD = "s3cret-pass"


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'sia.db'}",
        jwt_secret_key=TEST_SECRET,
        bcrypt_rounds=4,
        rate_limit_requests=10000,
        log_level="WARNING",
    )


@pytest.fixture
def hasher() -> PasswordHasher:
    # Minimum cost factor keeps the suite fast.
    return PasswordHasher(rounds=4)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET)


@pytest_asyncio.fixture
async def app(test_settings) -> AsyncGenerator[FastAPI, None]:
    """
    A fresh application with its tables created.

    ASGITransport does not run the lifespan, so tables are created here
    and the engine is disposed on teardown.
    """
    application = create_app(test_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to `app` in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def db_session(app) -> AsyncGenerator[AsyncSession, None]:
    """A raw session on the app's database; nothing is committed."""
    async with app.state.database.session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def auth_headers(test_client) -> Dict[str, str]:
    """Registers and logs in an account; returns a bearer Authorization header."""
    await test_client.post(
        "/api/auth/register",
        json={"email": "owner@example.com", "password": TEST_PASSWORD},
    )
    response = await test_client.post(
        "/api/auth/login",
        json={"email": "owner@example.com", "password": TEST_PASSWORD},
    )
    return {"Authorization": f"Bearer {response.json()['accessToken']}"}


@pytest.fixture
def mock_db_session():
    """
    AsyncMock simulating AsyncSession, for repository tests that need
    storage calls to hang or fail on demand.
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.get = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session
