"""Auth routes — shared-password login and logout via a session cookie."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from starlette.concurrency import run_in_threadpool

from treeserve.api.deps import get_app_settings, is_authenticated, session_token
from treeserve.api.routes.pages import templates
from treeserve.config import Settings
from treeserve.schemas.auth import LoginForm
from treeserve.services import get_authenticator
from treeserve.services.session_store import LOGIN_PATH, SESSION_COOKIE_NAME

logger = logging.getLogger(__name__)
router = APIRouter()


def _login_page(request: Request, settings: Settings, error: str | None = None, status_code: int = 200):
    return templates.TemplateResponse(
        request,
        "login.html",
        {"app_name": settings.app_name, "error": error},
        status_code=status_code,
    )


@router.get(LOGIN_PATH, response_class=HTMLResponse, include_in_schema=False)
async def login_page(request: Request, settings: Settings = Depends(get_app_settings)):
    auth = get_authenticator()
    if not auth.enabled or is_authenticated(request):
        return RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    return _login_page(request, settings)


@router.post(LOGIN_PATH, include_in_schema=False)
async def login(
    request: Request,
    form: Annotated[LoginForm, Form()],
    settings: Settings = Depends(get_app_settings),
):
    """Check the password; on success set the session cookie and go home."""
    auth = get_authenticator()
    if not auth.enabled:
        return RedirectResponse("/", status_code=status.HTTP_302_FOUND)

    token = await run_in_threadpool(auth.login, form.password)
    if token is None:
        return _login_page(request, settings, "Invalid password.", status.HTTP_401_UNAUTHORIZED)

    response = RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        path="/",
        httponly=True,
        samesite="lax",
    )
    return response


@router.api_route("/logout", methods=["GET", "POST"], include_in_schema=False)
async def logout(request: Request):
    auth = get_authenticator()
    if not auth.enabled:
        return RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    auth.logout(session_token(request))
    response = RedirectResponse(LOGIN_PATH, status_code=status.HTTP_302_FOUND)
    response.delete_cookie(SESSION_COOKIE_NAME, path="/", httponly=True, samesite="lax")
    return response
