"""
Snippetbox: User Service Tests
==============================

What:  Tests for UserService (insert, authenticate, exists, get, update,
       update_password, delete, list) and the bcrypt helpers.
How:   The SQLite test database; bcrypt runs at the minimum cost.

What we test:
    ✅ Passwords are stored hashed and verified with bcrypt
    ✅ A taken email raises DuplicateEmailError
    ✅ Unknown email and wrong password both raise InvalidCredentialsError
    ✅ update_password() checks the current password first
    ✅ Passwords past 72 bytes never match
    ✅ update() and delete() report missing users; list() is newest first
"""

from unittest.mock import patch

import pytest
from sqlalchemy.exc import SQLAlchemyError

from snippetbox.database import session_scope
from snippetbox.exceptions import (
    DatabaseError,
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
)
from snippetbox.services.user_service import UserService, check_password, hash_password


class TestPasswordHashing:

    @pytest.mark.asyncio
    async def test_hash_and_check(self):
        hashed = await hash_password("pa55word")
        assert hashed != b"pa55word"
        assert hashed.startswith(b"$2b$04$")
        assert await check_password(hashed, "pa55word")
        assert not await check_password(hashed, "wrong")
        assert not await check_password(hashed, "pa55word" + "x" * 80)


class TestUserService:

    def setup_method(self):
        self.service = UserService()

    async def create_alice(self, password="pa55word"):
        async with session_scope() as db:
            return await self.service.insert(db, "Alice", "alice@example.com", password)

    @pytest.mark.asyncio
    async def test_insert_and_get(self, db_tables):
        user_id = await self.create_alice()

        async with session_scope() as db:
            user = await self.service.get(db, user_id)
            assert await self.service.exists(db, user_id)

        assert user.name == "Alice"
        assert user.email == "alice@example.com"
        assert user.hashed_password != b"pa55word"

    @pytest.mark.asyncio
    async def test_duplicate_email(self, db_tables):
        await self.create_alice()

        with pytest.raises(DuplicateEmailError):
            await self.create_alice()

    @pytest.mark.asyncio
    async def test_authenticate(self, db_tables):
        user_id = await self.create_alice()

        async with session_scope() as db:
            assert await self.service.authenticate(db, "alice@example.com", "pa55word") == user_id

    @pytest.mark.asyncio
    async def test_authenticate_wrong_password(self, db_tables):
        await self.create_alice()

        async with session_scope() as db:
            with pytest.raises(InvalidCredentialsError):
                await self.service.authenticate(db, "alice@example.com", "not-it")

    @pytest.mark.asyncio
    async def test_authenticate_unknown_email(self, db_tables):
        async with session_scope() as db:
            with pytest.raises(InvalidCredentialsError):
                await self.service.authenticate(db, "nobody@example.com", "pa55word")

    @pytest.mark.asyncio
    async def test_missing_user(self, db_tables):
        async with session_scope() as db:
            assert not await self.service.exists(db, 999)
            with pytest.raises(NotFoundError):
                await self.service.get(db, 999)

    @pytest.mark.asyncio
    async def test_update_password(self, db_tables):
        user_id = await self.create_alice()

        async with session_scope() as db:
            await self.service.update_password(db, user_id, "pa55word", "n3w-pa55word")

        async with session_scope() as db:
            assert await self.service.authenticate(db, "alice@example.com", "n3w-pa55word") == user_id
            with pytest.raises(InvalidCredentialsError):
                await self.service.authenticate(db, "alice@example.com", "pa55word")

    @pytest.mark.asyncio
    async def test_update_password_rejects_wrong_current(self, db_tables):
        user_id = await self.create_alice()

        async with session_scope() as db:
            with pytest.raises(InvalidCredentialsError):
                await self.service.update_password(db, user_id, "guess", "n3w-pa55word")

    @pytest.mark.asyncio
    async def test_authenticate_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = SQLAlchemyError("connection reset")

        with pytest.raises(DatabaseError):
            await self.service.authenticate(mock_db_session, "alice@example.com", "pa55word")

    @pytest.mark.asyncio
    async def test_authenticate_password_over_bcrypt_limit(self, db_tables):
        await self.create_alice()

        async with session_scope() as db:
            with pytest.raises(InvalidCredentialsError):
                await self.service.authenticate(db, "alice@example.com", "x" * 80)

    @pytest.mark.asyncio
    async def test_update_password_rejects_current_over_bcrypt_limit(self, db_tables):
        user_id = await self.create_alice()

        async with session_scope() as db:
            with pytest.raises(InvalidCredentialsError):
                await self.service.update_password(db, user_id, "x" * 80, "n3w-pa55word")

    @pytest.mark.asyncio
    async def test_unknown_email_still_checks_a_hash(self, db_tables):
        with patch(
            "snippetbox.services.user_service.check_password", wraps=check_password
        ) as checked:
            async with session_scope() as db:
                with pytest.raises(InvalidCredentialsError):
                    await self.service.authenticate(db, "nobody@example.com", "pa55word")

        assert checked.await_count == 1

    @pytest.mark.asyncio
    async def test_update(self, db_tables):
        user_id = await self.create_alice()

        async with session_scope() as db:
            await self.service.update(db, user_id, "Alice B.", "alice.b@example.com")

        async with session_scope() as db:
            user = await self.service.get(db, user_id)
        assert user.name == "Alice B."
        assert user.email == "alice.b@example.com"

    @pytest.mark.asyncio
    async def test_update_to_taken_email(self, db_tables):
        await self.create_alice()
        async with session_scope() as db:
            bob_id = await self.service.insert(db, "Bob", "bob@example.com", "pa55word")

        with pytest.raises(DuplicateEmailError):
            async with session_scope() as db:
                await self.service.update(db, bob_id, "Bob", "alice@example.com")

    @pytest.mark.asyncio
    async def test_update_missing_user(self, db_tables):
        async with session_scope() as db:
            with pytest.raises(NotFoundError):
                await self.service.update(db, 999, "Nobody", "nobody@example.com")

    @pytest.mark.asyncio
    async def test_delete(self, db_tables):
        user_id = await self.create_alice()

        async with session_scope() as db:
            await self.service.delete(db, user_id)

        async with session_scope() as db:
            assert not await self.service.exists(db, user_id)
            with pytest.raises(NotFoundError):
                await self.service.delete(db, user_id)

    @pytest.mark.asyncio
    async def test_list_newest_first(self, db_tables):
        alice_id = await self.create_alice()
        async with session_scope() as db:
            bob_id = await self.service.insert(db, "Bob", "bob@example.com", "pa55word")

        async with session_scope() as db:
            users = await self.service.list(db)

        assert [user.id for user in users] == [bob_id, alice_id]

    @pytest.mark.asyncio
    async def test_list_empty(self, db_tables):
        async with session_scope() as db:
            assert await self.service.list(db) == []
