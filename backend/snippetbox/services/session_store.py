"""
Snippetbox: Session State and Stores
=====================================

What:  Per-client key-value session state keyed by an opaque token, plus the
       stores that persist it between requests.
How:   SessionData is loaded by SessionMiddleware at the start of a request,
       mutated by handlers (flash messages, authenticatedUserID) and written
       back through a SessionStore when the request leaves the middleware.

Stores:
    MemorySessionStore:    dict guarded by a lock; single process only
    DatabaseSessionStore:  `sessions` table via async SQLAlchemy; a background
                           task sweeps expired rows

Session lifecycle:
    new ──put/pop/remove──▶ MODIFIED ──commit──▶ saved under `token`
     │                         │
     │                    renew_token()        old token deleted, data kept
     │                         │
     └────────destroy()────────┴──▶ DESTROYED ──commit──▶ token deleted
"""

import asyncio
import json
import logging
import secrets
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from snippetbox.database import async_session_factory
from snippetbox.models.session import SessionRecord

logger = logging.getLogger(__name__)


def generate_token() -> str:
    """32 random bytes, URL-safe base64 (43 chars)."""
    return secrets.token_urlsafe(32)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SessionData:
    """
    Mutable session state for one request.

    Attributes:
        token:      Current token, or None for a session never saved
        values:     The key-value data (JSON-serializable values only)
        deadline:   Absolute expiry time (UTC)
        status:     UNMODIFIED, MODIFIED or DESTROYED
        superseded_tokens: Tokens replaced by renew_token() or destroy(),
                    deleted from the store on commit
    """

    UNMODIFIED = "unmodified"
    MODIFIED = "modified"
    DESTROYED = "destroyed"

    def __init__(
        self,
        token: Optional[str],
        values: Optional[Dict[str, Any]] = None,
        deadline: Optional[datetime] = None,
    ):
        self.token = token
        self.values: Dict[str, Any] = dict(values or {})
        self.deadline = deadline or _utcnow()
        self.status = self.UNMODIFIED
        self.superseded_tokens: List[str] = []

    @classmethod
    def new(cls, lifetime: timedelta) -> "SessionData":
        return cls(token=None, deadline=_utcnow() + lifetime)

    # ── Reads ─────────────────────────────────────────────────────────────
    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def exists(self, key: str) -> bool:
        return key in self.values

    def keys(self) -> List[str]:
        return sorted(self.values)

    # ── Writes ────────────────────────────────────────────────────────────
    def put(self, key: str, value: Any) -> None:
        self.values[key] = value
        self.status = self.MODIFIED

    def pop(self, key: str, default: Any = None) -> Any:
        """Return and delete `key`; a one-time read (flash messages)."""
        if key not in self.values:
            return default
        self.status = self.MODIFIED
        return self.values.pop(key)

    def pop_string(self, key: str) -> str:
        value = self.pop(key, "")
        return value if isinstance(value, str) else ""

    def remove(self, key: str) -> None:
        if key in self.values:
            del self.values[key]
            self.status = self.MODIFIED

    def clear(self) -> None:
        if self.values:
            self.values.clear()
            self.status = self.MODIFIED

    # ── Token lifecycle ───────────────────────────────────────────────────
    def renew_token(self) -> None:
        """
        Issue a new token for the same data.

        Called at privilege changes (login, logout) so a token planted before
        authentication cannot be used after it.
        """
        if self.token:
            self.superseded_tokens.append(self.token)
        self.token = generate_token()
        self.status = self.MODIFIED

    def destroy(self) -> None:
        """Drop all data and delete the session from the store on commit."""
        if self.token:
            self.superseded_tokens.append(self.token)
        self.token = None
        self.values.clear()
        self.status = self.DESTROYED

    @property
    def modified(self) -> bool:
        return self.status == self.MODIFIED

    @property
    def destroyed(self) -> bool:
        return self.status == self.DESTROYED

    # ── Serialization ─────────────────────────────────────────────────────
    def encode(self) -> str:
        return json.dumps(self.values, separators=(",", ":"), sort_keys=True)

    @classmethod
    def decode(cls, token: str, data: str, deadline: datetime) -> "SessionData":
        return cls(token=token, values=json.loads(data), deadline=_as_utc(deadline))

    def __repr__(self) -> str:
        token = f"{self.token[:8]}..." if self.token else None
        return f"<SessionData(token={token}, status='{self.status}', keys={self.keys()})>"


class SessionStore(ABC):
    """
    Abstract persistence for SessionData.

    Contract:
        - load() returns None for unknown or expired tokens
        - save() overwrites any previous data stored under the token
        - delete() is a no-op for unknown tokens
        - Implementations must be safe for concurrent requests
    """

    @abstractmethod
    async def load(self, token: str) -> Optional[SessionData]:
        ...

    @abstractmethod
    async def save(self, token: str, session: SessionData) -> None:
        ...

    @abstractmethod
    async def delete(self, token: str) -> None:
        ...


class MemorySessionStore(SessionStore):
    """
    In-process store.

    Sessions are kept as encoded JSON so a saved snapshot cannot be changed
    through a SessionData object that is still in use by a handler.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, Tuple[str, datetime]] = {}
        self._lock = threading.Lock()

    async def load(self, token: str) -> Optional[SessionData]:
        with self._lock:
            entry = self._sessions.get(token)
            if entry is None:
                return None
            data, deadline = entry
            if deadline <= _utcnow():
                del self._sessions[token]
                return None
        return SessionData.decode(token, data, deadline)

    async def save(self, token: str, session: SessionData) -> None:
        with self._lock:
            self._sessions[token] = (session.encode(), session.deadline)

    async def delete(self, token: str) -> None:
        with self._lock:
            self._sessions.pop(token, None)

    def __contains__(self, token: str) -> bool:
        with self._lock:
            return token in self._sessions

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class DatabaseSessionStore(SessionStore):
    """
    Store backed by the `sessions` table.

    Each operation runs in its own short transaction, independent of any
    session the request handler has open.
    """

    def __init__(
        self,
        session_factory: Callable[[], AsyncSession] = async_session_factory,
    ):
        self._session_factory = session_factory

    async def load(self, token: str) -> Optional[SessionData]:
        async with self._session_factory() as db:
            result = await db.execute(
                select(SessionRecord).where(
                    SessionRecord.token == token,
                    SessionRecord.expiry > _utcnow(),
                )
            )
            record = result.scalar_one_or_none()
        if record is None:
            return None
        return SessionData.decode(record.token, record.data, record.expiry)

    async def save(self, token: str, session: SessionData) -> None:
        async with self._session_factory() as db:
            await db.merge(
                SessionRecord(token=token, data=session.encode(), expiry=session.deadline)
            )
            await db.commit()

    async def delete(self, token: str) -> None:
        async with self._session_factory() as db:
            await db.execute(delete(SessionRecord).where(SessionRecord.token == token))
            await db.commit()

    async def delete_expired(self) -> int:
        """Remove every expired row; returns the number deleted."""
        async with self._session_factory() as db:
            result = await db.execute(
                delete(SessionRecord).where(SessionRecord.expiry <= _utcnow())
            )
            await db.commit()
        return result.rowcount or 0

    async def run_cleanup(self, interval: float) -> None:
        """
        Sweep expired sessions every `interval` seconds until cancelled.

        Runs as a detached task, outside any request chain, so it contains
        its own failures: an error in one sweep is logged and the loop waits
        for the next one.
        """
        while True:
            await asyncio.sleep(interval)
            try:
                removed = await self.delete_expired()
            except Exception:
                logger.error("Session cleanup failed", exc_info=True)
                continue
            if removed:
                logger.debug("Removed %d expired sessions", removed)
