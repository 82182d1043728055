from datetime import datetime
from typing import Protocol

from church_site.domain.entities import AdminRecord

from .models import SessionInfo


class SessionStorePort(Protocol):
    """The hosted auth service as seen by the gate."""

    def get_current_session(self) -> SessionInfo | None:
        """Return the active session, or None. May raise SessionStoreError."""
        ...

    def sign_out(self) -> None:
        """Terminate the active session."""
        ...


class AdminRepoPort(Protocol):
    def get_by_email(self, email: str) -> AdminRecord | None:
        """Case-insensitive lookup. May raise StoreError."""
        ...

    def save(self, record: AdminRecord) -> AdminRecord: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
