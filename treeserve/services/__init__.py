"""Business logic services — singleton registry."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from treeserve.config import Settings
    from treeserve.services.auth_service import Authenticator
    from treeserve.services.broadcast import BroadcastHub
    from treeserve.services.scheduler import SessionScheduler
    from treeserve.services.watcher import DirectoryWatcher

logger = logging.getLogger(__name__)

_authenticator: Authenticator | None = None
_broadcast_hub: BroadcastHub | None = None
_watcher: DirectoryWatcher | None = None
_scheduler: SessionScheduler | None = None


async def init_services(settings: Settings) -> None:
    """Create and wire up all service singletons."""
    global _authenticator, _broadcast_hub, _watcher, _scheduler

    from treeserve.services.auth_service import Authenticator
    from treeserve.services.broadcast import BroadcastHub
    from treeserve.services.scheduler import SessionScheduler
    from treeserve.services.session_store import SessionStore
    from treeserve.services.watcher import DirectoryWatcher

    ttl = timedelta(minutes=settings.session_ttl_minutes) if settings.session_ttl_minutes > 0 else None
    sessions = SessionStore(ttl=ttl)
    _authenticator = Authenticator.from_password(settings.password, sessions)

    if _authenticator.enabled and ttl is not None:
        _scheduler = SessionScheduler(sessions, settings.session_purge_interval_seconds)
        _scheduler.start()

    # Live updates: hub first so no watcher event is published into the void
    _broadcast_hub = BroadcastHub()
    _broadcast_hub.start()
    _watcher = DirectoryWatcher(
        settings.root_dir,
        _broadcast_hub,
        use_polling=settings.watch_use_polling,
    )
    _watcher.start()
    logger.info("Services initialized (auth=%s)", _authenticator.enabled)


async def shutdown_services() -> None:
    """Stop watcher, hub and scheduler, in that order."""
    global _authenticator, _broadcast_hub, _watcher, _scheduler
    if _watcher:
        await _watcher.stop()
        _watcher = None
    if _broadcast_hub:
        await _broadcast_hub.stop()
        _broadcast_hub = None
    if _scheduler:
        await _scheduler.stop()
        _scheduler = None
    _authenticator = None


def get_authenticator() -> Authenticator:
    if _authenticator is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _authenticator


def get_broadcast_hub() -> BroadcastHub:
    if _broadcast_hub is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _broadcast_hub


def get_watcher() -> DirectoryWatcher:
    if _watcher is None:
        raise RuntimeError("Services not initialized — call init_services() first")
    return _watcher
