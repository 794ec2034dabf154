"""
Inkwell Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── temp_storage: Temporary directory for file operations
    ├── sample_image_bytes / sample_jpeg_bytes: real image headers for uploads
    ├── sample_html_bytes: script content that uploads must reject
    ├── test_settings: Settings pointing at a per-test upload directory
    ├── db_engine: SQLite (aiosqlite) engine with tables created
    ├── app: create_app() wired to db_engine
    └── client_factory: builds HTTPX AsyncClients with their own cookie jars
"""

import os
import tempfile
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings for testing BEFORE any inkwell imports: the engine and
# the module-level app are built from the environment at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./inkwell_test.db"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="inkwell_test_")
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from inkwell.config import Settings  # noqa: E402
from inkwell.database import create_tables, get_db_session  # noqa: E402
from inkwell.main import create_app  # noqa: E402

TEST_SECRET = "test-secret-not-for-production"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    An AsyncMock that simulates AsyncSession behavior.
    How:     Mocks execute, flush, delete, commit, rollback, and close.

    Usage:
        async def test_get_post(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = post
            result = await post_service.get_post(mock_db_session, post_id)
    """
    session = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.flush = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def temp_storage(tmp_path):
    """A fresh upload directory for each test (cleaned up by pytest)."""
    storage_dir = tmp_path / "uploads"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def sample_image_bytes():
    """
    A complete 1x1 PNG for upload tests.

    Upload validation reads the file signature with libmagic, so the bytes
    must be a real PNG, not just the 8-byte magic number.
    """
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
        b"\x00\x00\x00\rIDATx\x9cc\x00\x01\x00\x00\x05\x00\x01\r\n-\xb4"
        b"\x00\x00\x00\x00IEND\xaeB`\x82"
    )


@pytest.fixture
def sample_jpeg_bytes():
    """Minimal JPEG: Start of Image (FFD8) + JFIF marker + End of Image (FFD9)."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


@pytest.fixture
def sample_html_bytes():
    """Active content that must never be accepted as a cover."""
    return b"<!DOCTYPE html>\n<html><body><script>fetch(\"/logout\")</script></body></html>\n"


@pytest.fixture
def test_settings(temp_storage):
    return Settings(
        upload_dir=temp_storage,
        jwt_secret=TEST_SECRET,
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """
    A file-backed SQLite engine per test with all tables created.

    NullPool: every session opens its own connection, so nothing outlives
    the test's event loop.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'inkwell.db'}",
        poolclass=NullPool,
    )
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def app(test_settings, db_engine):
    """The application under test, with get_db_session bound to db_engine."""
    application = create_app(test_settings)
    session_factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db_session] = override_db_session
    yield application
    application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client_factory(app):
    """
    Builds HTTPX AsyncClients that talk to the app in-process.

    Each client keeps its own cookie jar, so one client per user models
    separate browsers.

    Usage:
        async def test_something(client_factory):
            alice = await client_factory()
            await alice.post("/register", json={...})
    """
    clients = []

    async def make_client() -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield make_client

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def test_client(client_factory):
    """A single anonymous client."""
    return await client_factory()


# ══════════════════════════════════════════════════════════════════════════
# Helpers
# ══════════════════════════════════════════════════════════════════════════

async def register_and_login(client: AsyncClient, username: str, password: str = "pw") -> dict:
    """Register `username`, log the client in, and return the login body."""
    response = await client.post("/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    response = await client.post("/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()
