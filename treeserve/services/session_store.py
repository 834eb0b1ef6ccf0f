"""In-memory session tokens for the shared-password gate."""

from __future__ import annotations

import logging
import secrets
import threading
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)

SESSION_COOKIE_NAME = "treeserve_session"
SESSION_TOKEN_BYTES = 32  # 256 bits

LOGIN_PATH = "/login"
PROTECTED_API_PREFIXES = ("/api/", "/ws")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStore:
    """Thread-safe token -> issued_at map with optional expiry."""

    def __init__(
        self,
        ttl: timedelta | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._sessions: dict[str, datetime] = {}
        self._lock = threading.Lock()
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta | None:
        return self._ttl

    @staticmethod
    def generate_token() -> str:
        return secrets.token_hex(SESSION_TOKEN_BYTES)

    def add(self, token: str) -> None:
        with self._lock:
            self._sessions[token] = self._clock()

    def is_valid(self, token: str | None) -> bool:
        """Membership test; tokens past the TTL are evicted and rejected."""
        if not token:
            return False
        with self._lock:
            issued_at = self._sessions.get(token)
            if issued_at is None:
                return False
            if self._expired(issued_at, self._clock()):
                del self._sessions[token]
                return False
            return True

    def remove(self, token: str | None) -> None:
        if not token:
            return
        with self._lock:
            self._sessions.pop(token, None)

    def purge_expired(self) -> int:
        """Drop every expired session. Returns how many were removed."""
        if self._ttl is None:
            return 0
        now = self._clock()
        with self._lock:
            stale = [t for t, issued in self._sessions.items() if self._expired(issued, now)]
            for token in stale:
                del self._sessions[token]
        if stale:
            logger.debug("Purged %d expired sessions", len(stale))
        return len(stale)

    def _expired(self, issued_at: datetime, now: datetime) -> bool:
        return self._ttl is not None and now - issued_at >= self._ttl

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


class Access(str, Enum):
    ALLOW = "allow"
    UNAUTHORIZED = "unauthorized"
    REDIRECT = "redirect"


def resolve_access(path: str, authenticated: bool) -> Access:
    """Gate decision for one request path.

    The login page is always reachable; API and live-update routes answer 401;
    everything else is sent to the login page.
    """
    if authenticated or path == LOGIN_PATH:
        return Access.ALLOW
    if path.startswith(PROTECTED_API_PREFIXES):
        return Access.UNAUTHORIZED
    return Access.REDIRECT
