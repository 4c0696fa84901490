"""
Snippetbox: Snippet Handlers
=============================

What:  Home page, snippet detail page and the create-snippet form.
How:   Each handler is a plain `async def handler(request) -> Response`;
       routes/__init__.py wraps it in the dynamic or protected chain.

Routes:
    GET  /                     home                 (dynamic)
    GET  /about                about                (dynamic)
    GET  /snippet/view/{id}    snippet_view         (dynamic)
    GET  /snippet/create       snippet_create       (protected)
    POST /snippet/create       snippet_create_post  (protected)
"""

import logging

from starlette.requests import Request
from starlette.responses import Response

from snippetbox.database import session_scope
from snippetbox.exceptions import NotFoundError
from snippetbox.routes.helpers import flash, not_found, parse_id, redirect
from snippetbox.schemas.forms import FormErrors, SnippetCreateForm, bind_form
from snippetbox.services.snippet_service import snippet_service
from snippetbox.templating import render

logger = logging.getLogger(__name__)


async def home(request: Request) -> Response:
    async with session_scope() as db:
        snippets = await snippet_service.latest(db)
    return render(request, "pages/home.html", {"snippets": snippets})


async def about(request: Request) -> Response:
    return render(request, "pages/about.html")


async def snippet_view(request: Request) -> Response:
    """
    Show one snippet.

    A non-numeric or non-positive ID is answered like a missing snippet:
    404, never a server error.
    """
    snippet_id = parse_id(request.path_params.get("id"))
    if snippet_id is None:
        return not_found()

    try:
        async with session_scope() as db:
            snippet = await snippet_service.get(db, snippet_id)
    except NotFoundError:
        return not_found()

    return render(request, "pages/view.html", {"snippet": snippet})


async def snippet_create(request: Request) -> Response:
    # Default the expiry radio button to one year
    return render(
        request,
        "pages/create.html",
        {"form": {"title": "", "content": "", "expires": "365"}, "errors": FormErrors()},
    )


async def snippet_create_post(request: Request) -> Response:
    form, values, errors = bind_form(SnippetCreateForm, await request.form())
    if form is None:
        return render(
            request,
            "pages/create.html",
            {"form": values, "errors": errors},
            status_code=422,
        )

    async with session_scope() as db:
        snippet_id = await snippet_service.insert(db, form.title, form.content, form.expires)

    flash(request, "Snippet successfully created!")
    return redirect(f"/snippet/view/{snippet_id}")
