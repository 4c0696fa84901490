"""
Snippetbox: User SQLAlchemy Model
==================================

What:  ORM model representing the `users` table.
Who:   Used by UserService (signup, authentication, account pages).

Table Design:
    - email carries a unique constraint (users_uc_email); a violation on
      insert is reported as DuplicateEmailError
    - hashed_password holds the bcrypt hash (60 chars)
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, LargeBinary, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from snippetbox.database import Base


class User(Base):
    """A registered account."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)

    hashed_password: Mapped[bytes] = mapped_column(LargeBinary(60), nullable=False)

    created: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        UniqueConstraint("email", name="users_uc_email"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
