"""
Snippetbox: User Service
=========================

What:  Signup, credential checks and account management for `users`.
How:   Passwords are hashed with bcrypt (cost from settings). Hashing and
       comparison are CPU-bound, so they run in a worker thread to keep the
       event loop responsive.
Who:   Called by the user/account handlers.

Operations:
    insert()           → new user; DuplicateEmailError on a taken email
    authenticate()     → user ID; InvalidCredentialsError on any mismatch
    exists()           → bool
    get()              → User; NotFoundError when missing
    update()           → new name/email; DuplicateEmailError on a taken email
    update_password()  → verifies the current password first
    delete()           → NotFoundError when no row was removed
    list()             → every user, newest first

bcrypt only looks at the first 72 bytes of a password. Forms reject longer
new passwords; a longer password offered at login never matches.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import List, Optional

import bcrypt
from sqlalchemy import delete, desc, exists, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from snippetbox.config import settings
from snippetbox.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from snippetbox.models.user import User

logger = logging.getLogger(__name__)

MAX_PASSWORD_BYTES = 72

# Compared against when the email is unknown, so both paths cost one bcrypt check
_dummy_hash: Optional[bytes] = None


def _is_duplicate_email(error: IntegrityError) -> bool:
    # PostgreSQL reports the constraint name, SQLite the column
    message = str(error.orig)
    return "users_uc_email" in message or "users.email" in message


async def hash_password(password: str) -> bytes:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_cost)
    return await asyncio.to_thread(bcrypt.hashpw, password.encode("utf-8"), salt)


async def check_password(hashed: bytes, password: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    return await asyncio.to_thread(bcrypt.checkpw, encoded, hashed)


async def _unknown_user_hash() -> bytes:
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = await hash_password("snippetbox-unknown-user")
    return _dummy_hash


class UserService:
    """Data access and credential handling for user accounts."""

    async def insert(self, db: AsyncSession, name: str, email: str, password: str) -> int:
        """
        Create a user with a bcrypt-hashed password.

        Raises:
            DuplicateEmailError: The email is already registered
            DatabaseError: Any other database failure
        """
        user = User(
            name=name,
            email=email,
            hashed_password=await hash_password(password),
            created=datetime.now(timezone.utc),
        )
        try:
            db.add(user)
            await db.flush()
        except IntegrityError as e:
            if _is_duplicate_email(e):
                raise DuplicateEmailError(email=email) from e
            logger.error("Integrity error inserting user: %s", str(e))
            raise DatabaseError(context={"operation": "insert_user"}) from e
        except SQLAlchemyError as e:
            logger.error("Database error inserting user: %s", str(e), exc_info=True)
            raise DatabaseError(context={"operation": "insert_user"}) from e

        logger.info("User %d signed up", user.id)
        return user.id

    async def authenticate(self, db: AsyncSession, email: str, password: str) -> int:
        """
        Return the ID of the user matching email and password.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
        """
        try:
            result = await db.execute(
                select(User.id, User.hashed_password).where(User.email == email)
            )
            row = result.one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error authenticating user: %s", str(e))
            raise DatabaseError(context={"operation": "authenticate"}) from e

        if row is None:
            await check_password(await _unknown_user_hash(), password)
            raise InvalidCredentialsError()

        user_id, hashed_password = row
        if not await check_password(hashed_password, password):
            raise InvalidCredentialsError()
        return user_id

    async def exists(self, db: AsyncSession, user_id: int) -> bool:
        try:
            result = await db.execute(select(exists().where(User.id == user_id)))
        except SQLAlchemyError as e:
            logger.error("Database error checking user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id}) from e
        return bool(result.scalar())

    async def get(self, db: AsyncSession, user_id: int) -> User:
        """
        Retrieve a user by ID.

        Raises:
            NotFoundError: No user with this ID
        """
        try:
            user = await db.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error("Database error fetching user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id}) from e

        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return user

    async def update_password(
        self,
        db: AsyncSession,
        user_id: int,
        current_password: str,
        new_password: str,
    ) -> None:
        """
        Replace a user's password after verifying the current one.

        Raises:
            NotFoundError: No user with this ID
            InvalidCredentialsError: current_password does not match
        """
        user = await self.get(db, user_id)
        if not await check_password(user.hashed_password, current_password):
            raise InvalidCredentialsError()

        user.hashed_password = await hash_password(new_password)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating password for %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id}) from e

        logger.info("User %d changed their password", user_id)

    async def update(self, db: AsyncSession, user_id: int, name: str, email: str) -> None:
        """
        Change a user's name and email.

        Raises:
            NotFoundError: No user with this ID
            DuplicateEmailError: The email belongs to another user
        """
        user = await self.get(db, user_id)
        user.name = name
        user.email = email
        try:
            await db.flush()
        except IntegrityError as e:
            if _is_duplicate_email(e):
                raise DuplicateEmailError(email=email) from e
            logger.error("Integrity error updating user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id}) from e
        except SQLAlchemyError as e:
            logger.error("Database error updating user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id}) from e

    async def delete(self, db: AsyncSession, user_id: int) -> None:
        """
        Remove a user.

        Raises:
            NotFoundError: No user with this ID
        """
        try:
            result = await db.execute(delete(User).where(User.id == user_id))
        except SQLAlchemyError as e:
            logger.error("Database error deleting user %s: %s", user_id, str(e))
            raise DatabaseError(context={"user_id": user_id}) from e

        if result.rowcount == 0:
            raise NotFoundError(resource="user", resource_id=user_id)
        logger.info("User %d deleted", user_id)

    async def list(self, db: AsyncSession) -> List[User]:
        """All users, newest first."""
        try:
            result = await db.execute(
                select(User).order_by(desc(User.created), desc(User.id))
            )
        except SQLAlchemyError as e:
            logger.error("Database error listing users: %s", str(e))
            raise DatabaseError(context={"operation": "list_users"}) from e
        return list(result.scalars().all())


# ── Singleton Instance ────────────────────────────────────────────────────
user_service = UserService()
