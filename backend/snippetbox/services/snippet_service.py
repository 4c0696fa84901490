"""
Snippetbox: Snippet Service
============================

What:  Creates and retrieves snippets.
How:   Plain SQLAlchemy 2.0 select/insert statements on the `snippets` table;
       expired snippets are filtered out in SQL.
Who:   Called by the snippet handlers (home, view, create).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snippetbox.exceptions import DatabaseError, NotFoundError
from snippetbox.models.snippet import Snippet

logger = logging.getLogger(__name__)


class SnippetService:
    """
    Data access for snippets.

    Error Handling Strategy:
        A missing or expired snippet raises NotFoundError. Driver failures are
        logged and wrapped in DatabaseError so no SQL text reaches a response.
    """

    async def insert(
        self,
        db: AsyncSession,
        title: str,
        content: str,
        expires_days: int,
    ) -> int:
        """
        Store a new snippet and return its ID.

        Args:
            db: Async database session
            title: Snippet title (validated by the form, at most 100 chars)
            content: Snippet body
            expires_days: Lifetime in days (1, 7 or 365)
        """
        now = datetime.now(timezone.utc)
        snippet = Snippet(
            title=title,
            content=content,
            created=now,
            expires=now + timedelta(days=expires_days),
        )
        try:
            db.add(snippet)
            await db.flush()  # Assigns the autoincrement ID
        except SQLAlchemyError as e:
            logger.error("Database error inserting snippet: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "insert_snippet"}) from e

        logger.info("Snippet %d created (expires in %d days)", snippet.id, expires_days)
        return snippet.id

    async def get(self, db: AsyncSession, snippet_id: int) -> Snippet:
        """
        Retrieve a single non-expired snippet.

        Raises:
            NotFoundError: No snippet with this ID, or it has expired
            DatabaseError: Query execution failed
        """
        now = datetime.now(timezone.utc)
        try:
            result = await db.execute(
                select(Snippet).where(Snippet.id == snippet_id, Snippet.expires > now)
            )
            snippet = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching snippet %s: %s", snippet_id, str(e))
            raise DatabaseError(context={"snippet_id": snippet_id}) from e

        if snippet is None:
            raise NotFoundError(resource="snippet", resource_id=snippet_id)
        return snippet

    async def latest(self, db: AsyncSession, limit: int = 10) -> List[Snippet]:
        """Return up to `limit` non-expired snippets, newest first."""
        now = datetime.now(timezone.utc)
        try:
            result = await db.execute(
                select(Snippet)
                .where(Snippet.expires > now)
                .order_by(desc(Snippet.id))
                .limit(limit)
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing snippets: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "latest_snippets"}) from e
        return list(result.scalars().all())


# ── Singleton Instance ────────────────────────────────────────────────────
snippet_service = SnippetService()
