"""Health check."""

from fastapi import APIRouter

from treeserve import __version__
from treeserve.schemas.system import HealthResponse
from treeserve.services import get_authenticator, get_broadcast_hub, get_watcher

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Lightweight status: auth mode, live clients, watcher state."""
    watcher = get_watcher()
    return HealthResponse(
        version=__version__,
        auth_enabled=get_authenticator().enabled,
        live_clients=get_broadcast_hub().client_count,
        watcher_running=watcher.is_running,
        watched_directories=watcher.watched_directories,
    )


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
