"""
Snippetbox: Snippet Service Unit Tests
======================================

What:  Tests for SnippetService (insert, get, latest).
How:   Mock DB sessions for error handling; the SQLite test database for the
       query behaviour (expiry filtering, ordering).

What we test:
    ✅ insert() returns the new ID and sets the expiry
    ✅ get() hides missing and expired snippets behind NotFoundError
    ✅ latest() returns at most 10 live snippets, newest first
    ✅ Driver errors are wrapped in DatabaseError
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError

from snippetbox.database import session_scope
from snippetbox.exceptions import DatabaseError, NotFoundError
from snippetbox.models.snippet import Snippet
from snippetbox.services.snippet_service import SnippetService


class TestSnippetServiceErrors:
    """Error handling with a mocked database session."""

    def setup_method(self):
        self.service = SnippetService()

    @pytest.mark.asyncio
    async def test_get_not_found(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(NotFoundError):
            await self.service.get(mock_db_session, 42)

    @pytest.mark.asyncio
    async def test_get_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection lost")

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.get(mock_db_session, 1)
        assert "connection lost" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_insert_database_error(self, mock_db_session):
        mock_db_session.flush.side_effect = SQLAlchemyError("disk full")

        with pytest.raises(DatabaseError):
            await self.service.insert(mock_db_session, "title", "content", 7)

    @pytest.mark.asyncio
    async def test_latest_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("timeout")

        with pytest.raises(DatabaseError):
            await self.service.latest(mock_db_session)


class TestSnippetServiceQueries:
    """Query behaviour against the SQLite test database."""

    def setup_method(self):
        self.service = SnippetService()

    @pytest.mark.asyncio
    async def test_insert_and_get(self, db_tables):
        async with session_scope() as db:
            snippet_id = await self.service.insert(db, "O snail", "Climb Mount Fuji", 7)

        async with session_scope() as db:
            snippet = await self.service.get(db, snippet_id)

        assert snippet.title == "O snail"
        assert snippet.content == "Climb Mount Fuji"
        lifetime = snippet.expires - snippet.created
        assert lifetime == timedelta(days=7)

    @pytest.mark.asyncio
    async def test_expired_snippet_is_not_found(self, db_tables):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        async with session_scope() as db:
            expired = Snippet(title="old", content="gone", created=past, expires=past)
            db.add(expired)
            await db.flush()
            expired_id = expired.id

        async with session_scope() as db:
            with pytest.raises(NotFoundError):
                await self.service.get(db, expired_id)

    @pytest.mark.asyncio
    async def test_latest_newest_first_limited(self, db_tables):
        async with session_scope() as db:
            ids = [await self.service.insert(db, f"snippet {n}", "body", 365) for n in range(12)]

        async with session_scope() as db:
            latest = await self.service.latest(db)

        assert [s.id for s in latest] == sorted(ids, reverse=True)[:10]
