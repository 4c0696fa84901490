"""
Snippetbox: Database Session Management
========================================

What:  Async SQLAlchemy engine, session factory and the transaction scope
       every handler and service call runs in.
Who:   Request handlers and the account pages (session_scope), the health
       route (engine), the database session store (async_session_factory).
When:  Engine is created at module import; a scope is opened per operation.

Connection Pooling:
    pool_size=20, max_overflow=10:  at most 30 connections to PostgreSQL
    pool_pre_ping:                  validates connections before use
    pool_recycle=3600:              recycles connections every hour

    SQLite URLs (tests, local development) get a NullPool instead: every
    checkout opens a fresh connection to the database file.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from snippetbox.config import settings


def _engine_options() -> Dict[str, Any]:
    """Pool options for the configured backend."""
    if settings.is_sqlite:
        return {"poolclass": NullPool}
    return {
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_pre_ping": settings.db_pool_pre_ping,
        "pool_recycle": 3600,
    }


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(
    settings.database_url,
    # Echo SQL queries only in DEBUG mode
    echo=settings.log_level == "DEBUG",
    **_engine_options(),
)


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after the session closes
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with this metadata, which Alembic reads for
    migrations and the test suite uses for create_all/drop_all.
    """
    pass


# ── Session Scope ─────────────────────────────────────────────────────────
@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """
    Provide a transactional scope around a series of operations.

    Commits when the block exits normally; rolls back and re-raises when it
    raises. The session is closed either way.

    Example usage in a handler:
        async with session_scope() as db:
            snippet = await snippet_service.get(db, snippet_id)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def dispose_engine() -> None:
    """Close every pooled connection; called from the lifespan shutdown."""
    await engine.dispose()
