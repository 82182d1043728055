"""Posts component port definitions - protocols for dependencies."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from church_site.domain.entities import Post


class PostRepoPort(Protocol):
    """Posts table. Every method may raise StoreError."""

    def get_by_id(self, post_id: UUID) -> Post | None:
        """Retrieve a post by ID."""
        ...

    def save(self, post: Post) -> Post:
        """Insert or replace a post."""
        ...

    def delete(self, post_id: UUID) -> bool:
        """Delete a post. Returns False if it did not exist."""
        ...

    def list_published(
        self,
        post_type: str | None = None,
        category: str | None = None,
        limit: int = 10,
    ) -> list[Post]:
        """Published posts ordered by published_at descending."""
        ...

    def list_all(self, include_drafts: bool = True) -> list[Post]:
        """Posts ordered by created_at descending."""
        ...

    def list_scheduled_due(self, now: datetime) -> list[Post]:
        """Scheduled posts whose schedule time is at or before `now`."""
        ...

    def search_published(self, query: str, limit: int = 20) -> list[Post]:
        """Published posts whose title or content contains `query`."""
        ...


class ClockPort(Protocol):
    """Protocol for time operations."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...
