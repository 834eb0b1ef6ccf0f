"""Shared-password login on top of the session store."""

from __future__ import annotations

import logging

from treeserve.services.session_store import SessionStore
from treeserve.utils.hashing import hash_password, verify_password

logger = logging.getLogger(__name__)


class Authenticator:
    """Verifies the configured password and hands out session tokens.

    With no password configured the gate is disabled and every request
    counts as authenticated.
    """

    def __init__(self, sessions: SessionStore, password_hash: bytes | None = None):
        self._sessions = sessions
        self._password_hash = password_hash

    @classmethod
    def from_password(cls, password: str, sessions: SessionStore) -> "Authenticator":
        if not password:
            logger.info("Password protection disabled")
            return cls(sessions)
        logger.info("Password protection enabled")
        return cls(sessions, hash_password(password))

    @property
    def enabled(self) -> bool:
        return self._password_hash is not None

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    def login(self, password: str) -> str | None:
        """Return a fresh session token, or None when the password is wrong."""
        if not self.enabled:
            return None
        if not verify_password(password, self._password_hash):
            logger.warning("Failed login attempt")
            return None
        token = self._sessions.generate_token()
        self._sessions.add(token)
        return token

    def is_authenticated(self, token: str | None) -> bool:
        if not self.enabled:
            return True
        return self._sessions.is_valid(token)

    def logout(self, token: str | None) -> None:
        self._sessions.remove(token)
