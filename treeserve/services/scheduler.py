"""APScheduler-based background job for session expiry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler

if TYPE_CHECKING:
    from treeserve.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class SessionScheduler:
    """Periodically drops expired sessions so the map cannot grow unbounded."""

    def __init__(self, sessions: SessionStore, interval_seconds: int):
        self._sessions = sessions
        self._interval = interval_seconds
        self._scheduler = AsyncIOScheduler(
            job_defaults={"coalesce": True, "max_instances": 1}
        )

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        self._scheduler.add_job(
            self._purge_sessions,
            "interval",
            seconds=self._interval,
            id="purge_sessions",
            name="Purge expired sessions",
        )
        self._scheduler.start()
        logger.info("Session scheduler started — purging every %ds", self._interval)

    async def stop(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Session scheduler stopped")

    async def _purge_sessions(self) -> None:
        try:
            removed = self._sessions.purge_expired()
            if removed:
                logger.info("Purged %d expired sessions", removed)
        except Exception as e:
            logger.error("Session purge failed: %s", e)
