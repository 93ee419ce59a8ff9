"""Admin Sessions: server-validated credentials and expiring bearer tokens.

Invariants:
    - Credentials are compared in constant time against settings, never client data
    - Tokens are random (secrets.token_urlsafe) and expire after admin_session_ttl_seconds
    - Expired tokens are removed on first sight
    - Session table is process-local; a restart logs every admin out
"""

import hmac
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from samaj_diary.config import Settings
from samaj_diary.core.errors import AdminAuthError

logger = logging.getLogger(__name__)


@dataclass
class AdminSession:
    token: str
    email: str
    expires_at: datetime


def _same(a: str, b: str) -> bool:
    return hmac.compare_digest(a.encode(), b.encode())


class AdminSessions:
    """In-memory token table for the single administrator."""

    def __init__(
        self, settings: Settings, clock: Callable[[], datetime] | None = None,
    ):
        self.settings = settings
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._sessions: dict[str, AdminSession] = {}

    def login(self, email: str, password: str) -> AdminSession:
        email_ok = _same(email.strip().lower(), self.settings.admin_email.strip().lower())
        password_ok = _same(password, self.settings.admin_password)
        if not (email_ok and password_ok):
            logger.warning("Admin login rejected")
            raise AdminAuthError("invalid credentials")
        self._prune()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            email=self.settings.admin_email,
            expires_at=self._clock() + timedelta(
                seconds=self.settings.admin_session_ttl_seconds,
            ),
        )
        self._sessions[session.token] = session
        logger.info("Admin logged in")
        return session

    def validate(self, token: str | None) -> AdminSession:
        if not token:
            raise AdminAuthError("missing token")
        session = self._sessions.get(token)
        if session is None:
            raise AdminAuthError("unknown token")
        if self._clock() >= session.expires_at:
            self._sessions.pop(token, None)
            raise AdminAuthError("token expired")
        return session

    def logout(self, token: str) -> None:
        self._sessions.pop(token, None)

    def _prune(self) -> None:
        now = self._clock()
        for token in [t for t, s in self._sessions.items() if now >= s.expires_at]:
            del self._sessions[token]
