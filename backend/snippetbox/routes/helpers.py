"""
Snippetbox: Handler Helpers
============================

What:  Small response builders shared by the request handlers.

Client errors get the bare status phrase as body ("Not Found",
"Bad Request"), never internal detail. Faults are not handled here:
handlers let them propagate to RecoverPanicMiddleware.
"""

from http import HTTPStatus
from typing import Optional

from starlette.requests import Request
from starlette.responses import PlainTextResponse, RedirectResponse, Response

from snippetbox.templating import FLASH_KEY


def client_error(status_code: int) -> Response:
    return PlainTextResponse(HTTPStatus(status_code).phrase, status_code=status_code)


def not_found() -> Response:
    return client_error(404)


def redirect(url: str) -> Response:
    """303 See Other: the follow-up request is always a GET."""
    return RedirectResponse(url, status_code=303)


def flash(request: Request, message: str) -> None:
    request.session.put(FLASH_KEY, message)


def parse_id(value: Optional[str]) -> Optional[int]:
    """Positive integer path parameter, or None when malformed."""
    try:
        number = int(value or "")
    except ValueError:
        return None
    return number if number >= 1 else None
