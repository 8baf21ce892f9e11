"""DJ login: one shared username/password, session tokens kept in memory.

This keeps customers off the DJ screen; it is not a security boundary.
"""
import hmac
import logging
import secrets
import threading
from typing import Optional, Set

logger = logging.getLogger(__name__)


class DjGate:
    def __init__(self, username: str, password: str) -> None:
        self._username = username
        self._password = password
        self._sessions: Set[str] = set()
        self._lock = threading.Lock()

    def login(self, username: str, password: str) -> Optional[str]:
        """Return a session token if the credentials match, else None."""
        user_ok = hmac.compare_digest(username.encode(), self._username.encode())
        password_ok = hmac.compare_digest(password.encode(), self._password.encode())
        if not (user_ok and password_ok):
            logger.info("DJ login rejected")
            return None
        token = secrets.token_urlsafe(24)
        with self._lock:
            self._sessions.add(token)
        logger.info("DJ logged in")
        return token

    def is_authenticated(self, token: Optional[str]) -> bool:
        if not token:
            return False
        with self._lock:
            return token in self._sessions

    def logout(self, token: Optional[str]) -> None:
        with self._lock:
            self._sessions.discard(token)
