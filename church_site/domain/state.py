from datetime import datetime

from church_site.domain.entities import (
    Draft,
    PostState,
    PostStatus,
    Published,
    Scheduled,
)


def next_state(
    current: PostState | None,
    new_status: PostStatus,
    now: datetime,
    scheduled_for: datetime | None = None,
) -> PostState:
    """
    Compute the state a post moves into when saved with `new_status`.

    `current` is None for a post being created. Publication time is set once:
    re-saving an already published post keeps its original `published_at`.
    Raises ValueError if a scheduled state lacks its schedule time.
    """
    if new_status == "published":
        if isinstance(current, Published):
            return current
        return Published(published_at=now)

    if new_status == "scheduled":
        if scheduled_for is None:
            raise ValueError("Cannot schedule a post without a schedule time")
        return Scheduled(scheduled_for=scheduled_for)

    if new_status == "draft":
        return Draft()

    raise ValueError(f"Unknown post status: {new_status}")


def is_due(state: PostState, now: datetime) -> bool:
    """A scheduled post is due once its schedule time has been reached."""
    return isinstance(state, Scheduled) and state.scheduled_for <= now
