"""Session store adapters.

InMemorySessionStore is the registry of issued sessions, keyed by token
hash. TokenSessionStore presents one bearer token to the authorization
gate as "the current session", which is how the gate sees the hosted
auth service.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Protocol
from uuid import UUID

from church_site.adapters.auth.crypto import JWTAuthAdapter
from church_site.components.auth import SessionInfo, SessionStoreError
from church_site.core.ports.db import StoreError
from church_site.domain.entities import Session, User

logger = logging.getLogger(__name__)


class _Clock(Protocol):
    def now_utc(self) -> datetime: ...


class _UserLookup(Protocol):
    def get_by_id(self, user_id: UUID) -> User | None: ...


class InMemorySessionStore:
    """In-memory session storage - suitable for single-process deployments."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def get(self, token_hash: str) -> Session | None:
        return self._sessions.get(token_hash)

    def save(self, session: Session) -> None:
        self._sessions[session.token_hash] = session

    def delete(self, token_hash: str) -> None:
        self._sessions.pop(token_hash, None)

    def delete_by_user(self, user_id: UUID) -> int:
        """Delete all sessions for a user. Returns count deleted."""
        to_remove = [k for k, v in self._sessions.items() if v.user_id == user_id]
        for token_hash in to_remove:
            del self._sessions[token_hash]
        return len(to_remove)

    def clear(self) -> None:
        """Clear all sessions - useful for testing."""
        self._sessions.clear()


class TokenSessionStore:
    """SessionStorePort for a single request's bearer token."""

    def __init__(
        self,
        token: str | None,
        sessions: InMemorySessionStore,
        crypto: JWTAuthAdapter,
        clock: _Clock,
        users: _UserLookup | None = None,
    ) -> None:
        self.token = token
        self.sessions = sessions
        self.crypto = crypto
        self.clock = clock
        self.users = users

    def get_current_session(self) -> SessionInfo | None:
        if not self.token:
            return None

        claims = self.crypto.validate_token(self.token)
        if claims is None:
            return None

        token_hash = self.crypto.hash_token(self.token)
        session = self.sessions.get(token_hash)
        if session is None:
            return None
        if session.expires_at <= self.clock.now_utc():
            self.sessions.delete(token_hash)
            return None

        display_name = None
        if self.users is not None:
            try:
                user = self.users.get_by_id(session.user_id)
            except StoreError as e:
                raise SessionStoreError(f"Login record lookup failed: {e}") from e
            if user is None or user.status != "active":
                return None
            display_name = user.display_name

        return SessionInfo(
            user_id=session.user_id, email=session.email, display_name=display_name
        )

    def sign_out(self) -> None:
        if not self.token:
            return
        self.sessions.delete(self.crypto.hash_token(self.token))
        logger.info("Session signed out")
