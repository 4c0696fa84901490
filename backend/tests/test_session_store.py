"""
Snippetbox: Session State and Store Tests
=========================================

What:  Tests for SessionData and both SessionStore implementations.
How:   SessionData and MemorySessionStore are exercised directly; the
       database store runs against the SQLite test database.

What we test:
    ✅ put / pop / remove mark the session modified; reads do not
    ✅ renew_token() keeps the data and supersedes the old token
    ✅ destroy() clears data and supersedes the token
    ✅ Expired sessions are never loaded
    ✅ DatabaseSessionStore save / load / delete / delete_expired
"""

from datetime import datetime, timedelta, timezone

import pytest

from snippetbox.services.session_store import (
    DatabaseSessionStore,
    MemorySessionStore,
    SessionData,
    generate_token,
)


def make_session(lifetime=timedelta(hours=1), **values):
    session = SessionData.new(lifetime)
    for key, value in values.items():
        session.put(key, value)
    return session


class TestSessionData:

    def test_new_session_is_unmodified(self):
        session = SessionData.new(timedelta(hours=1))
        assert session.token is None
        assert not session.modified
        assert not session.destroyed
        assert session.keys() == []

    def test_reads_do_not_modify(self):
        session = SessionData("tok", {"a": 1})
        assert session.get("a") == 1
        assert session.get("missing", "default") == "default"
        assert session.exists("a")
        assert not session.modified

    def test_put_marks_modified(self):
        session = SessionData("tok")
        session.put("flash", "hello")
        assert session.modified
        assert session.get("flash") == "hello"

    def test_pop_is_one_time_read(self):
        session = SessionData("tok", {"flash": "hello"})
        assert session.pop("flash") == "hello"
        assert session.pop("flash") is None
        assert session.modified

    def test_pop_missing_key_leaves_session_unmodified(self):
        session = SessionData("tok")
        assert session.pop("flash", "none") == "none"
        assert not session.modified

    def test_pop_string_ignores_non_strings(self):
        session = SessionData("tok", {"flash": 42})
        assert session.pop_string("flash") == ""
        assert session.pop_string("missing") == ""

    def test_remove_missing_key_is_noop(self):
        session = SessionData("tok", {"a": 1})
        session.remove("b")
        assert not session.modified
        session.remove("a")
        assert session.modified
        assert not session.exists("a")

    def test_renew_token_keeps_values(self):
        session = SessionData("old-token", {"redirectPathAfterLogin": "/account/view"})
        session.renew_token()

        assert session.token != "old-token"
        assert session.superseded_tokens == ["old-token"]
        assert session.get("redirectPathAfterLogin") == "/account/view"
        assert session.modified

    def test_renew_token_of_unsaved_session(self):
        session = SessionData.new(timedelta(hours=1))
        session.renew_token()
        assert session.token is not None
        assert session.superseded_tokens == []

    def test_destroy(self):
        session = SessionData("tok", {"authenticatedUserID": 1})
        session.destroy()

        assert session.destroyed
        assert session.token is None
        assert session.keys() == []
        assert session.superseded_tokens == ["tok"]

    def test_encode_decode(self):
        deadline = datetime(2030, 1, 1, tzinfo=timezone.utc)
        original = SessionData("tok", {"b": [1, 2], "a": "x"}, deadline)

        restored = SessionData.decode("tok", original.encode(), deadline.replace(tzinfo=None))

        assert restored.values == {"a": "x", "b": [1, 2]}
        assert restored.deadline == deadline
        assert not restored.modified

    def test_generated_tokens_are_unique(self):
        tokens = {generate_token() for _ in range(100)}
        assert len(tokens) == 100
        assert all(len(token) == 43 for token in tokens)


class TestMemorySessionStore:

    @pytest.mark.asyncio
    async def test_save_and_load(self):
        store = MemorySessionStore()
        await store.save("tok", make_session(count=3))

        loaded = await store.load("tok")
        assert loaded.token == "tok"
        assert loaded.get("count") == 3
        assert not loaded.modified

    @pytest.mark.asyncio
    async def test_saved_snapshot_is_isolated(self):
        store = MemorySessionStore()
        session = make_session(count=1)
        await store.save("tok", session)

        session.put("count", 2)
        assert (await store.load("tok")).get("count") == 1

    @pytest.mark.asyncio
    async def test_unknown_token(self):
        assert await MemorySessionStore().load("nope") is None

    @pytest.mark.asyncio
    async def test_expired_session_is_not_loaded(self):
        store = MemorySessionStore()
        await store.save("tok", make_session(lifetime=timedelta(seconds=-1), a=1))

        assert await store.load("tok") is None
        assert "tok" not in store

    @pytest.mark.asyncio
    async def test_delete(self):
        store = MemorySessionStore()
        await store.save("tok", make_session(a=1))
        await store.delete("tok")
        await store.delete("never-saved")
        assert len(store) == 0


class TestDatabaseSessionStore:

    @pytest.mark.asyncio
    async def test_save_load_delete(self, db_tables):
        store = DatabaseSessionStore()
        await store.save("tok", make_session(authenticatedUserID=5))

        loaded = await store.load("tok")
        assert loaded.get("authenticatedUserID") == 5
        assert loaded.deadline.tzinfo is not None

        await store.delete("tok")
        assert await store.load("tok") is None

    @pytest.mark.asyncio
    async def test_save_overwrites(self, db_tables):
        store = DatabaseSessionStore()
        await store.save("tok", make_session(count=1))
        await store.save("tok", make_session(count=2))
        assert (await store.load("tok")).get("count") == 2

    @pytest.mark.asyncio
    async def test_expired_rows_are_ignored_and_swept(self, db_tables):
        store = DatabaseSessionStore()
        await store.save("stale", make_session(lifetime=timedelta(seconds=-1), a=1))
        await store.save("fresh", make_session(a=2))

        assert await store.load("stale") is None
        assert await store.delete_expired() == 1
        assert (await store.load("fresh")).get("a") == 2
