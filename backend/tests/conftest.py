"""
Snippetbox: Test Configuration (conftest.py)
============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.
Who:   Used by all test files in the tests/ directory.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── db_tables: Creates and drops every table in the SQLite test database
    ├── session_store: Empty in-memory session store
    ├── app: Application instance wired to session_store
    └── client: HTTPX AsyncClient talking to `app` over HTTPS
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Override settings BEFORE any snippetbox import: the engine and the
# settings singleton are created at import time
_test_dir = tempfile.mkdtemp(prefix="snippetbox_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_test_dir}/test.db"
os.environ["SESSION_STORE"] = "memory"
os.environ["SESSION_COOKIE_SECURE"] = "true"
os.environ["BCRYPT_COST"] = "4"  # Lowest cost bcrypt accepts; keeps tests fast
os.environ["LOG_LEVEL"] = "WARNING"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    What:    A MagicMock that simulates AsyncSession behavior.
    How:     Mocks execute, get, flush, commit, rollback, and close methods.

    Usage:
        async def test_get_snippet(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = snippet
            result = await snippet_service.get(mock_db_session, 1)
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


@pytest_asyncio.fixture
async def db_tables():
    """
    Creates every table in the SQLite test database, dropping them afterwards.

    Each test that touches the database starts from empty tables.
    """
    from snippetbox.database import Base, engine
    import snippetbox.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def session_store():
    from snippetbox.services.session_store import MemorySessionStore
    return MemorySessionStore()


@pytest.fixture
def app(db_tables, session_store):
    """A fresh application around `session_store`, with tables in place."""
    from snippetbox.main import create_app
    return create_app(session_store=session_store)


@pytest_asyncio.fixture
async def client(app):
    """
    Provides an async HTTP test client for endpoint testing.

    What:    HTTPX AsyncClient configured to talk to our FastAPI app.
    How:     Uses ASGITransport to route requests directly to the app. The
             base URL is HTTPS so the Secure session cookie is sent back.
             Redirects are not followed; tests assert on them directly.

    Usage:
        async def test_home(client):
            response = await client.get("/")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="https://test") as client:
        yield client
