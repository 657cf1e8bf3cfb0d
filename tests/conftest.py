"""Pytest configuration and fixtures.

Every test gets its own SQLite database file under tmp_path (via aiosqlite),
its own upload directory and its own application instance, so revocation
registries and accounts never leak between tests.
"""

import os
from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Set test environment variables before importing app modules
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
# Cheap Argon2 parameters keep the suite fast
os.environ["PASSWORD_HASH_TIME_COST"] = "1"
os.environ["PASSWORD_HASH_MEMORY_COST"] = "1024"
os.environ["PASSWORD_HASH_PARALLELISM"] = "1"

TEST_SECRET = os.environ["JWT_SECRET_KEY"]
TEST_USERNAME = "alice"
TEST_PASSWORD = "secret1"

# Smallest valid PNG signature plus padding; content is never decoded
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointing at a per-test database and upload directory."""
    from fileuploader.core.config import Settings

    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        jwt_secret_key=TEST_SECRET,
        upload_dir=str(tmp_path / "uploads"),
        max_upload_size=1024,
        password_hash_time_cost=1,
        password_hash_memory_cost=1024,
        password_hash_parallelism=1,
    )


@pytest.fixture
def password_hasher():
    from fileuploader.services.credentials import Argon2PasswordHasher

    return Argon2PasswordHasher(time_cost=1, memory_cost=1024, parallelism=1)


# --- Database Fixtures ---


@pytest_asyncio.fixture
async def db_engine(test_settings):
    """Create a SQLite database engine with all tables."""
    from fileuploader.models.base import BaseModel

    engine = create_async_engine(test_settings.database_url, poolclass=NullPool)

    async with engine.begin() as conn:
        await conn.run_sync(BaseModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def credential_store(db_session, password_hasher):
    from fileuploader.services.credentials import CredentialStore

    return CredentialStore(db_session, password_hasher, password_min_length=6)


# --- Application Fixtures ---


@pytest.fixture
def app(test_settings):
    """A fresh application with its own revocation registry."""
    from fileuploader.main import create_app

    return create_app(test_settings)


@pytest_asyncio.fixture
async def async_client(app, db_engine) -> AsyncGenerator[AsyncClient, None]:
    """Create an async test client.

    The app opens its own engine on the per-test database file that
    db_engine has already populated with tables.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    await app.state.engine.dispose()


@pytest_asyncio.fixture
async def registered_token(async_client) -> str:
    """Register the default test user and return its session token."""
    response = await async_client.post(
        "/api/v1/register",
        json={"username": TEST_USERNAME, "password": TEST_PASSWORD},
    )
    assert response.status_code == 201
    return response.json()["token"]


@pytest.fixture
def auth_headers(registered_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {registered_token}"}
