"""
Snippetbox: Routes Package
===========================

What:  Route table of the HTML application.
How:   Every route maps (method, path) to one composed handler, built by
       wrapping a plain handler in a chain:

    dynamic   = session                       pages that read/write the session
    protected = dynamic + authentication gate pages that need a login

Static assets are mounted without a chain (no session for a stylesheet).

Route Inventory:
    - snippets.py:  home, about, view, create
    - users.py:     signup, login, logout
    - account.py:   account page, password update
    - health.py:    GET /health (FastAPI router, JSON)
"""

from datetime import timedelta
from functools import partial
from typing import List

from starlette.routing import BaseRoute, Mount, Route
from starlette.staticfiles import StaticFiles

from snippetbox.config import settings
from snippetbox.middleware import RequireAuthenticationMiddleware, SessionMiddleware, new_chain
from snippetbox.routes import account, snippets, users
from snippetbox.services.session_store import SessionStore
from snippetbox.templating import STATIC_DIR


def build_routes(session_store: SessionStore) -> List[BaseRoute]:
    """Assemble the application routes around `session_store`."""
    dynamic = new_chain(
        partial(
            SessionMiddleware,
            store=session_store,
            lifetime=timedelta(seconds=settings.session_lifetime),
            cookie_name=settings.session_cookie_name,
            cookie_secure=settings.session_cookie_secure,
        )
    )
    protected = dynamic.append(RequireAuthenticationMiddleware)

    return [
        Mount("/static", app=StaticFiles(directory=str(STATIC_DIR)), name="static"),

        Route("/", dynamic.then(snippets.home), methods=["GET"], name="home"),
        Route("/about", dynamic.then(snippets.about), methods=["GET"], name="about"),
        Route(
            "/snippet/view/{id}",
            dynamic.then(snippets.snippet_view),
            methods=["GET"],
            name="snippet_view",
        ),
        Route("/user/signup", dynamic.then(users.user_signup), methods=["GET"], name="user_signup"),
        Route(
            "/user/signup",
            dynamic.then(users.user_signup_post),
            methods=["POST"],
            name="user_signup_post",
        ),
        Route("/user/login", dynamic.then(users.user_login), methods=["GET"], name="user_login"),
        Route(
            "/user/login",
            dynamic.then(users.user_login_post),
            methods=["POST"],
            name="user_login_post",
        ),

        Route(
            "/snippet/create",
            protected.then(snippets.snippet_create),
            methods=["GET"],
            name="snippet_create",
        ),
        Route(
            "/snippet/create",
            protected.then(snippets.snippet_create_post),
            methods=["POST"],
            name="snippet_create_post",
        ),
        Route(
            "/account/view",
            protected.then(account.account_view),
            methods=["GET"],
            name="account_view",
        ),
        Route(
            "/account/password/update",
            protected.then(account.account_password_update),
            methods=["GET"],
            name="account_password_update",
        ),
        Route(
            "/account/password/update",
            protected.then(account.account_password_update_post),
            methods=["POST"],
            name="account_password_update_post",
        ),
        Route(
            "/user/logout",
            protected.then(users.user_logout_post),
            methods=["POST"],
            name="user_logout_post",
        ),
    ]
