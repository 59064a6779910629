"""Login session management.

This module turns verified credentials into server-side sessions and resolves
session cookies back into accounts. The cookie value is a signed JWT whose
only claims are the session id and its expiry; the session row is the source
of truth, so deleting it logs the browser out even while the token is valid.
"""

import logging
import secrets
from datetime import datetime
from typing import Optional, Tuple

import pytz
from jose import JWTError, jwt

from config import SESSION_ALGORITHM, SESSION_MAX_AGE_SECONDS, SESSION_SECRET
from core.exceptions import AuthenticationError
from schemas.session import AuthSession
from schemas.user import User
from utils.storage import Storage
from utils.user_manager import UserManager

logger = logging.getLogger(__name__)


class SessionManager:
    """Manages the Anonymous -> Authenticated -> Anonymous session lifecycle."""

    def __init__(
        self,
        storage: Storage,
        max_age_seconds: int = SESSION_MAX_AGE_SECONDS,
        secret_key: str = SESSION_SECRET,
    ):
        """Initialize SessionManager.

        Args:
            storage: Storage backend holding accounts and sessions.
            max_age_seconds: Absolute session lifetime.
            secret_key: Key used to sign session cookies.
        """
        self.storage = storage
        self.max_age_seconds = max_age_seconds
        self.secret_key = secret_key
        self.user_manager = UserManager(storage)

    def _encode(self, session: AuthSession) -> str:
        claims = {"sid": session.session_id, "exp": session.expires_at_dt()}
        return jwt.encode(claims, self.secret_key, algorithm=SESSION_ALGORITHM)

    def _decode(self, token: str) -> Optional[str]:
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[SESSION_ALGORITHM])
        except JWTError:
            return None
        session_id = payload.get("sid")
        return session_id if isinstance(session_id, str) and session_id else None

    def start_session(self, user: User) -> str:
        """Create a session for an already verified account.

        Returns:
            Signed token to store in the session cookie.
        """
        session = AuthSession.start(
            session_id=secrets.token_urlsafe(32),
            user_id=user.id,
            max_age_seconds=self.max_age_seconds,
        )
        self.storage.create_session(session)
        logger.info("Session started for user id=%s", user.id)
        return self._encode(session)

    def login(self, username: str, password: str) -> Tuple[User, str]:
        """Verify credentials and start a session.

        Returns:
            The account and the signed session token.

        Raises:
            AuthenticationError: With the same message for an unknown username
                and a wrong password.
        """
        self.purge_expired()
        user = self.user_manager.authenticate(username, password)
        if user is None:
            logger.info("Failed login attempt")
            raise AuthenticationError()
        return user, self.start_session(user)

    def get_session(self, token: Optional[str]) -> Optional[AuthSession]:
        """Return the live session a token refers to, or None.

        Expired sessions are deleted when encountered. Storage failures
        propagate as ``InfrastructureError``.
        """
        if not token:
            return None
        session_id = self._decode(token)
        if session_id is None:
            return None
        session = self.storage.get_session(session_id)
        if session is None:
            return None
        if session.is_expired():
            self.storage.delete_session(session_id)
            return None
        return session

    def current_principal(self, token: Optional[str]) -> Optional[User]:
        """Resolve a session token to its account. None means anonymous."""
        session = self.get_session(token)
        if session is None:
            return None
        return self.storage.get_user(session.user_id)

    def logout(self, token: Optional[str]) -> bool:
        """Invalidate the session behind a token server-side.

        Returns:
            True if a session was removed.
        """
        session_id = self._decode(token) if token else None
        if session_id is None:
            return False
        removed = self.storage.delete_session(session_id)
        if removed:
            logger.info("Session ended")
        return removed

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        count = self.storage.delete_expired_sessions(now or datetime.now(pytz.utc))
        if count:
            logger.info("Pruned %d expired sessions", count)
        return count
