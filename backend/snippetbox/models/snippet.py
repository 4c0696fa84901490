"""
Snippetbox: Snippet SQLAlchemy Model
=====================================

What:  ORM model representing the `snippets` table.
Who:   Used by SnippetService for inserts and lookups, and by Alembic.

Table Design:
    - Integer primary key: snippets are addressed as /snippet/view/{id}
    - created / expires: UTC timestamps; a snippet past `expires` is treated
      as if it did not exist
    - Index on created: serves the "latest snippets" home page query
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class Snippet(Base):
    """
    A titled piece of text with an expiry date.

    Query Patterns:
        - Latest: WHERE expires > now ORDER BY id DESC LIMIT 10
        - Single: WHERE expires > now AND id = :id
    """

    __tablename__ = "snippets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(100), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    expires: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_snippets_created", "created"),
    )

    def __repr__(self) -> str:
        return f"<Snippet(id={self.id}, title='{self.title}', expires='{self.expires}')>"
