"""
Subscriber registry ports.

Every repository method may raise StoreError.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from church_site.components.subscribers.models import Subscriber


class SubscriberRepoPort(Protocol):
    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        """Get subscriber by ID."""
        ...

    def get_by_email(self, email: str) -> Subscriber | None:
        """Get subscriber by normalized email."""
        ...

    def save(self, subscriber: Subscriber) -> Subscriber:
        """Insert or update a subscriber row."""
        ...

    def add(self, subscriber: Subscriber) -> bool:
        """Insert a new row unless the email already exists. Returns whether it inserted."""
        ...

    def delete(self, subscriber_id: UUID) -> bool:
        """Delete subscriber by ID. Returns False if it did not exist."""
        ...

    def list_active(self) -> list[Subscriber]:
        """All active subscribers, oldest subscription first."""
        ...

    def list_filtered(
        self,
        is_active: bool | None = None,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Subscriber], int]:
        """One page of subscribers (newest first) and the total match count."""
        ...

    def count(self, is_active: bool | None = None, since: datetime | None = None) -> int:
        """Count rows, optionally by activity and subscription time."""
        ...


class ClockPort(Protocol):
    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...
