"""
Snippetbox: User Handlers
==========================

What:  Signup, login and logout.

Routes:
    GET  /user/signup    user_signup        (dynamic)
    POST /user/signup    user_signup_post   (dynamic)
    GET  /user/login     user_login         (dynamic)
    POST /user/login     user_login_post    (dynamic)
    POST /user/logout    user_logout_post   (protected)

Session handling:
    Login and logout both call renew_token() before changing
    authenticatedUserID, so the token a visitor held while anonymous is
    never valid for their authenticated session (session fixation).
"""

import logging

from starlette.requests import Request
from starlette.responses import Response

from snippetbox.database import session_scope
from snippetbox.exceptions import DuplicateEmailError, InvalidCredentialsError
from snippetbox.middleware.auth import AUTHENTICATED_USER_ID, REDIRECT_AFTER_LOGIN
from snippetbox.routes.helpers import flash, redirect
from snippetbox.schemas.forms import FormErrors, UserLoginForm, UserSignupForm, bind_form
from snippetbox.services.user_service import user_service
from snippetbox.templating import render

logger = logging.getLogger(__name__)

DEFAULT_AFTER_LOGIN = "/snippet/create"


async def user_signup(request: Request) -> Response:
    return render(
        request,
        "pages/signup.html",
        {"form": {"name": "", "email": ""}, "errors": FormErrors()},
    )


async def user_signup_post(request: Request) -> Response:
    form, values, errors = bind_form(UserSignupForm, await request.form())

    if form is not None:
        try:
            async with session_scope() as db:
                await user_service.insert(db, form.name, form.email, form.password)
        except DuplicateEmailError:
            errors.add_field_error("email", "Email address is already in use")

    if not errors.valid:
        values.pop("password", None)
        return render(
            request,
            "pages/signup.html",
            {"form": values, "errors": errors},
            status_code=422,
        )

    flash(request, "Your signup was successful. Please log in.")
    return redirect("/user/login")


async def user_login(request: Request) -> Response:
    return render(
        request,
        "pages/login.html",
        {"form": {"email": ""}, "errors": FormErrors()},
    )


async def user_login_post(request: Request) -> Response:
    form, values, errors = bind_form(UserLoginForm, await request.form())

    user_id = None
    if form is not None:
        try:
            async with session_scope() as db:
                user_id = await user_service.authenticate(db, form.email, form.password)
        except InvalidCredentialsError:
            errors.add_non_field_error("Email or password is incorrect")

    if user_id is None:
        values.pop("password", None)
        return render(
            request,
            "pages/login.html",
            {"form": values, "errors": errors},
            status_code=422,
        )

    session = request.session
    session.renew_token()
    session.put(AUTHENTICATED_USER_ID, user_id)
    logger.info("User %d logged in", user_id)

    return redirect(session.pop_string(REDIRECT_AFTER_LOGIN) or DEFAULT_AFTER_LOGIN)


async def user_logout_post(request: Request) -> Response:
    session = request.session
    session.renew_token()
    session.remove(AUTHENTICATED_USER_ID)
    flash(request, "You've been logged out successfully!")
    return redirect("/")
