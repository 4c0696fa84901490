"""
Snippetbox: Account Handlers
=============================

Routes (all protected):
    GET  /account/view                 account_view
    GET  /account/password/update      account_password_update
    POST /account/password/update      account_password_update_post
"""

import logging

from starlette.requests import Request
from starlette.responses import Response

from snippetbox.database import session_scope
from snippetbox.exceptions import InvalidCredentialsError, NotFoundError
from snippetbox.middleware.auth import AUTHENTICATED_USER_ID
from snippetbox.routes.helpers import flash, redirect
from snippetbox.schemas.forms import FormErrors, PasswordUpdateForm, bind_form
from snippetbox.services.user_service import user_service
from snippetbox.templating import render

logger = logging.getLogger(__name__)


def _signed_out(request: Request) -> Response:
    # The account was deleted after this session logged in
    request.session.remove(AUTHENTICATED_USER_ID)
    return redirect("/user/login")


async def account_view(request: Request) -> Response:
    user_id = request.session.get(AUTHENTICATED_USER_ID)
    try:
        async with session_scope() as db:
            user = await user_service.get(db, user_id)
    except NotFoundError:
        return _signed_out(request)

    return render(request, "pages/account.html", {"user": user})


async def account_password_update(request: Request) -> Response:
    async with session_scope() as db:
        found = await user_service.exists(db, request.session.get(AUTHENTICATED_USER_ID))
    if not found:
        return _signed_out(request)

    return render(request, "pages/password.html", {"errors": FormErrors()})


async def account_password_update_post(request: Request) -> Response:
    form, _, errors = bind_form(PasswordUpdateForm, await request.form())

    if form is not None:
        user_id = request.session.get(AUTHENTICATED_USER_ID)
        try:
            async with session_scope() as db:
                await user_service.update_password(
                    db, user_id, form.current_password, form.new_password
                )
        except InvalidCredentialsError:
            errors.add_field_error("current_password", "Current password is incorrect")
        except NotFoundError:
            return _signed_out(request)

    if not errors.valid:
        return render(request, "pages/password.html", {"errors": errors}, status_code=422)

    flash(request, "Your password has been updated!")
    return redirect("/account/view")
