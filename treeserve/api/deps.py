"""FastAPI dependency injection — served root, session cookie, access gate."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from starlette.requests import HTTPConnection

from treeserve.config import Settings
from treeserve.services import get_authenticator
from treeserve.services.path_resolver import MalformedPathError, PathError
from treeserve.services.session_store import (
    LOGIN_PATH,
    SESSION_COOKIE_NAME,
    Access,
    resolve_access,
)

logger = logging.getLogger(__name__)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_root_dir(request: Request) -> str:
    return request.app.state.settings.root_dir


def session_token(conn: HTTPConnection) -> Optional[str]:
    """Session token from the cookie, if any (works for HTTP and WebSocket)."""
    return conn.cookies.get(SESSION_COOKIE_NAME)


def is_authenticated(conn: HTTPConnection) -> bool:
    return get_authenticator().is_authenticated(session_token(conn))


async def session_gate(request: Request, call_next) -> Response:
    """HTTP middleware: allow, answer 401, or redirect to the login page."""
    access = resolve_access(request.url.path, is_authenticated(request))
    if access is Access.ALLOW:
        return await call_next(request)
    if access is Access.UNAUTHORIZED:
        return PlainTextResponse("Unauthorized", status_code=status.HTTP_401_UNAUTHORIZED)
    return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_302_FOUND)


def path_error_to_http(exc: Exception) -> HTTPException:
    """Map a domain error from path resolution or listing onto an HTTP error."""
    if isinstance(exc, MalformedPathError):
        return HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid path")
    if isinstance(exc, PathError):
        return HTTPException(status.HTTP_403_FORBIDDEN, f"Forbidden: {exc}")
    if isinstance(exc, OSError):
        return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.strerror or "I/O error")
    return HTTPException(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
