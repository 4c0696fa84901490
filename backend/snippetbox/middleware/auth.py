"""
Snippetbox: Authentication Gate
================================

What:  Keeps unauthenticated visitors away from protected routes.
How:   A request is authenticated when its session holds the
       `authenticatedUserID` key, which only the login handler sets. The gate
       checks presence only; it trusts the session populated by the login flow.

State per request:
    unauthenticated ──▶ 303 See Other → /user/login   (handler never runs)
    authenticated   ──▶ handler runs once, response gets Cache-Control: no-store

When:  After SessionMiddleware in the protected chain. Without a session in
       scope, request.session raises and the request fails as a fault.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

logger = logging.getLogger(__name__)

AUTHENTICATED_USER_ID = "authenticatedUserID"
REDIRECT_AFTER_LOGIN = "redirectPathAfterLogin"
LOGIN_PATH = "/user/login"


def is_authenticated(request: Request) -> bool:
    return request.session.exists(AUTHENTICATED_USER_ID)


class RequireAuthenticationMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not is_authenticated(request):
            # Send the user back here once they have logged in
            if request.method == "GET":
                request.session.put(REDIRECT_AFTER_LOGIN, request.url.path)
            logger.debug("Redirecting unauthenticated request for %s", request.url.path)
            return RedirectResponse(LOGIN_PATH, status_code=303)

        response = await call_next(request)
        # Pages behind the gate hold user data; browsers must not cache them
        response.headers["Cache-Control"] = "no-store"
        return response
