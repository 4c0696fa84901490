"""
Snippetbox: Panic-Containment Middleware
=========================================

What:  Turns any exception escaping the rest of the chain into a generic
       500 response.
How:   Wraps call_next in try/except. The response carries
       `Connection: close` so the server drops a connection that saw a
       half-finished request. Method, URI and traceback go to the log; the
       body only says "Internal Server Error".
When:  Outermost middleware of the standard chain.

Scope:
    Only the current request's call chain is covered. Work spawned with
    asyncio.create_task() or a background task runs outside this try block
    and must contain its own errors where it is spawned (see
    DatabaseSessionStore.run_cleanup).
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from snippetbox.middleware.logging import request_uri

logger = logging.getLogger(__name__)


def server_error_response() -> Response:
    return PlainTextResponse(
        "Internal Server Error",
        status_code=500,
        headers={"Connection": "close"},
    )


class RecoverPanicMiddleware(BaseHTTPMiddleware):
    """Contains faults raised anywhere below it in the chain."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            method = request.method
            uri = request_uri(request)
            logger.error(
                "unhandled error method=%s uri=%s: %s",
                method,
                uri,
                str(exc),
                exc_info=True,
                extra={"method": method, "uri": uri},
            )
            return server_error_response()
