"""
Snippetbox: Middleware Package
===============================

What:  Cross-cutting concerns composed into chains around request handlers.

Chains (outermost first):

    standard   = RecoverPanic → LogRequest → CommonHeaders      (whole router)
    dynamic    = Session                                        (app routes)
    protected  = dynamic + RequireAuthentication                (login needed)

    Request → [Recover] → [Log] → [Headers] → router → [Session] → [Auth] → handler

The order is reversed for responses, so the session is saved before the
security headers are added and the access log sees the final status.
"""

from snippetbox.middleware.auth import RequireAuthenticationMiddleware
from snippetbox.middleware.chain import Chain, ChainMiddleware, Middleware, new_chain
from snippetbox.middleware.headers import CommonHeadersMiddleware
from snippetbox.middleware.logging import LogRequestMiddleware
from snippetbox.middleware.recover import RecoverPanicMiddleware
from snippetbox.middleware.session import SessionMiddleware

__all__ = [
    "Chain",
    "ChainMiddleware",
    "CommonHeadersMiddleware",
    "LogRequestMiddleware",
    "Middleware",
    "RecoverPanicMiddleware",
    "RequireAuthenticationMiddleware",
    "SessionMiddleware",
    "new_chain",
]
