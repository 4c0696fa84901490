"""
Snippetbox: Session Middleware
===============================

What:  Loads session state before the wrapped handler runs and saves it after.
How:
    1. Read the token from the session cookie
    2. Load the session from the SessionStore (or start an empty one)
    3. Expose it to handlers as request.session
    4. Run the rest of the chain
    5. In a finally block, on success or fault: delete superseded/destroyed
       tokens and save a modified session
    6. On success, set (or clear) the cookie and add `Vary: Cookie`
When:  First middleware of the dynamic chain, so it always runs before the
       authentication gate and every handler that reads the session.

Cookie attributes: HttpOnly, SameSite=Lax, Path=/, Secure (configurable),
Max-Age = remaining lifetime of the session.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from snippetbox.services.session_store import SessionData, SessionStore, generate_token

logger = logging.getLogger(__name__)


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Load-and-save session handling around the wrapped handler.

    Configured with functools.partial when placed in a chain:

        partial(SessionMiddleware, store=store, lifetime=timedelta(hours=12))
    """

    def __init__(
        self,
        app: ASGIApp,
        store: SessionStore,
        lifetime: timedelta = timedelta(hours=12),
        cookie_name: str = "session",
        cookie_secure: bool = True,
    ):
        super().__init__(app)
        self.store = store
        self.lifetime = lifetime
        self.cookie_name = cookie_name
        self.cookie_secure = cookie_secure

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        session = await self._load(request.cookies.get(self.cookie_name))
        request.scope["session"] = session

        try:
            response = await call_next(request)
        finally:
            await self._commit(session)

        self._write_cookie(response, session)
        return response

    async def _load(self, token: Optional[str]) -> SessionData:
        if token:
            session = await self.store.load(token)
            if session is not None:
                return session
        return SessionData.new(self.lifetime)

    async def _commit(self, session: SessionData) -> None:
        """Persist the session; runs on every exit path of dispatch()."""
        for token in session.superseded_tokens:
            await self.store.delete(token)
        session.superseded_tokens.clear()

        if session.modified:
            if session.token is None:
                session.token = generate_token()
            await self.store.save(session.token, session)

    def _write_cookie(self, response: Response, session: SessionData) -> None:
        if session.destroyed:
            response.delete_cookie(
                self.cookie_name,
                path="/",
                secure=self.cookie_secure,
                httponly=True,
                samesite="lax",
            )
        elif session.modified:
            remaining = session.deadline - datetime.now(timezone.utc)
            response.set_cookie(
                self.cookie_name,
                session.token,
                max_age=max(int(remaining.total_seconds()), 0),
                path="/",
                secure=self.cookie_secure,
                httponly=True,
                samesite="lax",
            )
        response.headers.add_vary_header("Cookie")
