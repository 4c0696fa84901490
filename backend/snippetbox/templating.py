"""
Snippetbox: Template Rendering
===============================

What:  Jinja2 environment for the HTML pages and the data every page shares.
How:   Starlette's Jinja2Templates loads ui/html; render() merges the
       handler's context with the common template data:

           current_year       footer copyright year
           flash              one-time message, popped from the session
           is_authenticated   drives the nav links
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from starlette.requests import Request
from starlette.responses import Response
from starlette.templating import Jinja2Templates

from snippetbox.config import settings
from snippetbox.middleware.auth import is_authenticated

UI_DIR = Path(__file__).resolve().parent / "ui"
TEMPLATE_DIR = UI_DIR / "html"
STATIC_DIR = UI_DIR / "static"

FLASH_KEY = "flash"


def human_date(value: Optional[datetime]) -> str:
    """Format a timestamp as '02 Jan 2006 at 15:04' in UTC."""
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%d %b %Y at %H:%M")


templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.filters["human_date"] = human_date
templates.env.auto_reload = settings.debug


def template_data(request: Request) -> Dict[str, Any]:
    return {
        "current_year": datetime.now(timezone.utc).year,
        "flash": request.session.pop_string(FLASH_KEY),
        "is_authenticated": is_authenticated(request),
    }


def render(
    request: Request,
    name: str,
    context: Optional[Dict[str, Any]] = None,
    status_code: int = 200,
) -> Response:
    data = template_data(request)
    data.update(context or {})
    return templates.TemplateResponse(request, name, data, status_code=status_code)
