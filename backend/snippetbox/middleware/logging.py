"""
Snippetbox: Request Logging Middleware
=======================================

What:  Logs every HTTP request passing through the standard chain.
How:   Logs remote address, protocol, method and URI on arrival, before the
       rest of the chain runs; logs status and duration once a response comes
       back. The request and response are never altered.
When:  Second in the standard chain, inside RecoverPanicMiddleware.

What we log vs what we don't:
    ✅ method, URI, protocol, remote address, status, duration
    ❌ request bodies (passwords, snippet content), cookies
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("snippetbox.access")


def request_uri(request: Request) -> str:
    """Path plus query string, as sent by the client."""
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path


def remote_addr(request: Request) -> str:
    if request.client is None:
        return "unknown"
    return f"{request.client.host}:{request.client.port}"


class LogRequestMiddleware(BaseHTTPMiddleware):
    """Access log for every request, matched route or not."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        ip = remote_addr(request)
        proto = f"HTTP/{request.scope.get('http_version', '1.1')}"
        method = request.method
        uri = request_uri(request)

        logger.info(
            "received request ip=%s proto=%s method=%s uri=%s",
            ip,
            proto,
            method,
            uri,
            extra={"ip": ip, "proto": proto, "method": method, "uri": uri},
        )

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        # 5xx → ERROR, 4xx → WARNING, everything else → INFO
        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms from %s",
            method,
            uri,
            status,
            duration_ms,
            ip,
            extra={
                "method": method,
                "uri": uri,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "ip": ip,
            },
        )

        return response
