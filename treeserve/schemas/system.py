"""System status schemas."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    service: str = "treeserve"
    auth_enabled: bool = False
    live_clients: int = 0
    watcher_running: bool = False
    watched_directories: int = 0
