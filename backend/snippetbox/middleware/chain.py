"""
Snippetbox: Middleware Chain Builder
=====================================

What:  Composes an ordered sequence of middleware around a terminal handler.
How:   A handler is any ASGI application. A middleware is any callable that
       takes a handler and returns a new one; every BaseHTTPMiddleware
       subclass qualifies (``cls(app)``), and parameterized middleware is
       passed as ``functools.partial(cls, **options)``.

Nesting order:

    new_chain(m1, m2, m3).then(h)  ==  m1(m2(m3(h)))

    Request  ──▶ m1 ──▶ m2 ──▶ m3 ──▶ h
    Response ◀── m1 ◀── m2 ◀── m3 ◀──┘

Chains are immutable: append() and extend() return new chains, so one chain
can serve as the shared prefix of several others:

    dynamic = new_chain(session_middleware)
    protected = dynamic.append(RequireAuthenticationMiddleware)
"""

import functools
import inspect
from typing import Any, Callable, Tuple

from starlette.routing import request_response
from starlette.types import ASGIApp, Receive, Scope, Send

# A middleware turns one handler into another
Middleware = Callable[[ASGIApp], ASGIApp]


def as_handler(handler: Any) -> ASGIApp:
    """
    Adapt a request endpoint to an ASGI handler.

    Plain functions and bound methods (``async def f(request) -> Response``)
    are wrapped with Starlette's request_response, the same test Starlette's
    Route applies to its endpoints. Anything else is assumed to be an ASGI
    application already and is returned unchanged.
    """
    target = handler
    while isinstance(target, functools.partial):
        target = target.func
    if inspect.isfunction(target) or inspect.ismethod(target):
        return request_response(handler)
    return handler


class Chain:
    """An ordered, immutable sequence of middleware."""

    __slots__ = ("_middlewares",)

    def __init__(self, *middlewares: Middleware) -> None:
        self._middlewares: Tuple[Middleware, ...] = tuple(middlewares)

    @property
    def middlewares(self) -> Tuple[Middleware, ...]:
        return self._middlewares

    def append(self, *middlewares: Middleware) -> "Chain":
        """Return a new chain with `middlewares` added after this chain's."""
        return Chain(*self._middlewares, *middlewares)

    def extend(self, other: "Chain") -> "Chain":
        """Return a new chain running this chain's middleware, then `other`'s."""
        return Chain(*self._middlewares, *other.middlewares)

    def then(self, handler: Any) -> ASGIApp:
        """
        Wrap `handler` in every middleware of the chain.

        The first middleware is the outermost. An empty chain returns the
        (adapted) handler itself. The result can be invoked any number of
        times; each invocation is an independent request.
        """
        app = as_handler(handler)
        for middleware in reversed(self._middlewares):
            app = middleware(app)
        return app

    def __len__(self) -> int:
        return len(self._middlewares)

    def __repr__(self) -> str:
        names = ", ".join(_middleware_name(m) for m in self._middlewares)
        return f"Chain({names})"


def new_chain(*middlewares: Middleware) -> Chain:
    """Build a chain holding `middlewares` in order, with no terminal yet."""
    return Chain(*middlewares)


def _middleware_name(middleware: Middleware) -> str:
    while isinstance(middleware, functools.partial):
        middleware = middleware.func
    return getattr(middleware, "__name__", type(middleware).__name__)


class ChainMiddleware:
    """
    Mount a chain inside a Starlette/FastAPI middleware stack.

    Usage:
        app.add_middleware(ChainMiddleware, chain=standard)

    Everything the application stack places inside this middleware (the
    router and every route, matched or not) runs within the chain.
    """

    def __init__(self, app: ASGIApp, chain: Chain) -> None:
        self.chain = chain
        self.app = chain.then(app)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.app(scope, receive, send)
