"""Browser pages — the listing UI is rendered client-side from /api/files."""

from pathlib import Path

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from treeserve.api.deps import get_app_settings
from treeserve.config import Settings

TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
router = APIRouter()


def _render_browser(request: Request, settings: Settings) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "app_name": settings.app_name,
            "random_media_enabled": settings.random_button,
            "auth_enabled": settings.auth_enabled,
        },
    )


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request, settings: Settings = Depends(get_app_settings)):
    return _render_browser(request, settings)


@router.get("/browse/{browse_path:path}", response_class=HTMLResponse, include_in_schema=False)
async def browse(browse_path: str, request: Request, settings: Settings = Depends(get_app_settings)):
    """Same page as ``/``; the client reads the directory from its own URL."""
    return _render_browser(request, settings)
