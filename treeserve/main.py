"""treeserve FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from treeserve import __version__
from treeserve.api.deps import session_gate
from treeserve.config import Settings, settings as default_settings
from treeserve.services import init_services, shutdown_services

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    # === STARTUP ===
    settings: Settings = app.state.settings
    _setup_logging(settings)

    await init_services(settings)
    logger.info(
        "treeserve v%s serving %s on %s:%s",
        __version__, settings.root_dir, settings.host, settings.port,
    )

    try:
        yield
    finally:
        # === SHUTDOWN ===
        await shutdown_services()
        logger.info("treeserve shutting down")


def _setup_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in ("watchdog", "apscheduler", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


async def _log_requests(request: Request, call_next):
    client = request.client.host if request.client else "-"
    logger.info("%s %s - %s", request.method, request.url.path, client)
    return await call_next(request)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory."""
    from treeserve.api.routes import api_router, site_router

    settings = settings or default_settings
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )
    app.state.settings = settings

    # Registered inner-first: the gate runs after the request is logged
    app.middleware("http")(session_gate)
    app.middleware("http")(_log_requests)

    app.include_router(api_router, prefix="/api")
    app.include_router(site_router)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app


app = create_app()


def run(settings: Settings | None = None, **kwargs: Any) -> None:
    import uvicorn

    settings = settings or default_settings
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()
