"""
Snippetbox: FastAPI Application Factory
========================================

What:  Creates and configures the application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn snippetbox.main:app).
When:  Once at server startup; the returned app handles all requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Standard chain (every request, matched or not):         │
    │  ┌───────────────┐ ┌─────────────┐ ┌─────────────────┐   │
    │  │ Recover Panic │→│ Log Request │→│ Common Headers  │   │
    │  └───────────────┘ └─────────────┘ └─────────────────┘   │
    │                                                          │
    │  Router:                                                 │
    │  ┌──────────┐ ┌──────────────────┐ ┌──────────────────┐  │
    │  │ /static  │ │ dynamic routes   │ │ protected routes │  │
    │  │          │ │ [Session]        │ │ [Session → Auth] │  │
    │  └──────────┘ └──────────────────┘ └──────────────────┘  │
    │  ┌──────────┐                                            │
    │  │ /health  │                                            │
    │  └──────────┘                                            │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Start the expired-session sweeper (database store only)

    Shutdown:
    1. Cancel the sweeper
    2. Dispose the database engine (close all connections)
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import Response

from snippetbox import __version__
from snippetbox.config import settings
from snippetbox.database import dispose_engine
from snippetbox.middleware import (
    ChainMiddleware,
    CommonHeadersMiddleware,
    LogRequestMiddleware,
    RecoverPanicMiddleware,
    new_chain,
)
from snippetbox.routes import build_routes, health
from snippetbox.routes.helpers import client_error
from snippetbox.services.session_store import (
    DatabaseSessionStore,
    MemorySessionStore,
    SessionStore,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # snippetbox.access already logs every request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Session Store
# ══════════════════════════════════════════════════════════════════════════

def create_session_store() -> SessionStore:
    if settings.session_store == "memory":
        return MemorySessionStore()
    return DatabaseSessionStore()


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Render routing errors (unmatched path 404, wrong method 405) as plain
    status text, the same way handlers answer client errors.
    """

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> Response:
        response = client_error(exc.status_code)
        if exc.headers:
            response.headers.update(exc.headers)
        return response


def create_app(session_store: Optional[SessionStore] = None) -> FastAPI:
    """
    Create and configure the application.

    Args:
        session_store: Store for session state; defaults to the one selected
            by settings.session_store.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    store = session_store if session_store is not None else create_session_store()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # ── Startup ───────────────────────────────────────────────────────
        setup_logging()
        logger.info("Snippetbox %s starting up...", __version__)

        cleanup: Optional[asyncio.Task] = None
        if isinstance(store, DatabaseSessionStore):
            cleanup = asyncio.create_task(store.run_cleanup(settings.session_cleanup_interval))

        logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

        yield

        # ── Shutdown ──────────────────────────────────────────────────────
        logger.info("Snippetbox shutting down...")
        if cleanup is not None:
            cleanup.cancel()
            try:
                await cleanup
            except asyncio.CancelledError:
                pass
        await dispose_engine()
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="Snippetbox",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    # ── Standard Chain ────────────────────────────────────────────────────
    # Wraps the router, so every route, static assets and unmatched paths
    # included, gets panic recovery, access logging and security headers
    standard = new_chain(
        RecoverPanicMiddleware,
        LogRequestMiddleware,
        CommonHeadersMiddleware,
    )
    app.add_middleware(ChainMiddleware, chain=standard)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.router.routes.extend(build_routes(store))

    app.state.session_store = store
    return app


# uvicorn expects `snippetbox.main:app` to be importable
app = create_app()
