"""
Snippetbox: Security Headers Middleware
========================================

What:  Adds a fixed set of security headers to every response.
When:  Third in the standard chain; never blocks or rejects a request.

Headers:
    Content-Security-Policy    only same-origin scripts/styles, Google Fonts
    Referrer-Policy            full URL same-origin, origin only cross-origin
    X-Content-Type-Options     no MIME sniffing
    X-Frame-Options            no framing (clickjacking)
    X-XSS-Protection           legacy filter disabled, CSP replaces it
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; style-src 'self' fonts.googleapis.com; "
        "font-src fonts.gstatic.com"
    ),
    "Referrer-Policy": "origin-when-cross-origin",
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "deny",
    "X-XSS-Protection": "0",
}


class CommonHeadersMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value
        return response
