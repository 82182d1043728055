"""
Login service - the issuing side of the session store.

Verifies passwords against the `users` table and registers each issued
token in the session registry. Admin rights are not decided here; the
authorization gate resolves them on every admin request.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Protocol
from uuid import uuid4

from church_site.adapters.auth.crypto import JWTAuthAdapter
from church_site.adapters.auth.session_store import InMemorySessionStore
from church_site.adapters.sqlite.repos import SQLiteAdminRepo, SQLiteUserRepo
from church_site.domain.entities import AdminRecord, Session, User

logger = logging.getLogger(__name__)


class _Clock(Protocol):
    def now_utc(self) -> datetime: ...


class AuthService:
    def __init__(
        self,
        user_repo: SQLiteUserRepo,
        crypto: JWTAuthAdapter,
        sessions: InMemorySessionStore,
        clock: _Clock,
        ttl_minutes: int = 60 * 24,
    ):
        self.user_repo = user_repo
        self.crypto = crypto
        self.sessions = sessions
        self.clock = clock
        self.ttl_minutes = ttl_minutes

    def login(self, email: str, password: str) -> User | None:
        user = self.user_repo.get_by_email(email)
        if not user:
            return None
        if not self.crypto.verify_password(password, user.password_hash):
            return None
        if user.status != "active":
            return None
        return user

    def create_session(self, user: User) -> tuple[str, Session]:
        """Issue a token for `user` and register it. Returns (token, session)."""
        token = self.crypto.create_token(user.id, user.email, self.ttl_minutes)
        now = self.clock.now_utc()
        session = Session(
            id=str(uuid4()),
            user_id=user.id,
            email=user.email,
            token_hash=self.crypto.hash_token(token),
            expires_at=now + timedelta(minutes=self.ttl_minutes),
            created_at=now,
        )
        self.sessions.save(session)
        logger.info("Issued session for %s", user.email)
        return token, session

    def create_user(self, email: str, password: str, display_name: str | None = None) -> User:
        email = email.strip().lower()
        if self.user_repo.get_by_email(email):
            raise ValueError("Email already in use")

        now = self.clock.now_utc()
        user = User(
            id=uuid4(),
            email=email,
            display_name=display_name or email.split("@")[0],
            password_hash=self.crypto.hash_password(password),
            status="active",
            created_at=now,
            updated_at=now,
        )
        return self.user_repo.save(user)


def provision_admin(
    admin_repo: SQLiteAdminRepo,
    email: str,
    name: str | None = None,
    role: str = "admin",
) -> AdminRecord:
    """Grant admin rights to an email address, creating or updating its row."""
    email = email.strip().lower()
    existing = admin_repo.get_by_email(email)
    if existing:
        record = existing.model_copy(update={"role": role, "name": name or existing.name})
    else:
        record = AdminRecord(email=email, name=name, role=role)
    return admin_repo.save(record)
