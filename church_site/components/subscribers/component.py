"""
Subscriber registry component.

Key behaviors:
- One row per normalized (trimmed, lower-cased) email
- Subscribing an active address is an idempotent success
- Subscribing an inactive address reactivates the same row
- Unsubscribing deactivates; rows are only removed by an admin delete
"""

from __future__ import annotations

import logging
import re
from datetime import timedelta
from uuid import uuid4

from church_site.components.subscribers.models import (
    DeleteSubscriberInput,
    DeleteSubscriberOutput,
    ListSubscribersInput,
    ListSubscribersOutput,
    StatsInput,
    StatsOutput,
    Subscriber,
    SubscriberConfig,
    SubscriberStats,
    SubscribeInput,
    SubscribeOutput,
    UnsubscribeInput,
    UnsubscribeOutput,
    ValidateEmailOutput,
    ValidationError,
)
from church_site.components.subscribers.ports import ClockPort, SubscriberRepoPort
from church_site.core.ports.db import StoreError

logger = logging.getLogger(__name__)

# RFC 5322, simplified
EMAIL_REGEX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@"
    r"[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)+$"
)

STORE_ERROR = ValidationError("STORE_ERROR", "Subscriber store is unavailable", None)


def normalize_email(email: str | None) -> str:
    return email.strip().lower() if email else ""


def validate_email(email: str | None, max_length: int = 254) -> ValidateEmailOutput:
    """
    Normalize and validate an email address.

    Returns:
        ValidateEmailOutput carrying the normalized address when valid
    """
    normalized = normalize_email(email)

    if not normalized:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError("EMPTY_EMAIL", "Email address is required", "email")],
        )

    if len(normalized) > max_length:
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError("EMAIL_TOO_LONG", "Email address is too long", "email")],
        )

    if not EMAIL_REGEX.match(normalized):
        return ValidateEmailOutput(
            is_valid=False,
            errors=[ValidationError("INVALID_FORMAT", "Invalid email format", "email")],
        )

    return ValidateEmailOutput(is_valid=True, normalized_email=normalized)


# --- Run Handlers ---


def run_subscribe(
    inp: SubscribeInput,
    repo: SubscriberRepoPort,
    clock: ClockPort,
    *,
    config: SubscriberConfig | None = None,
) -> SubscribeOutput:
    cfg = config or SubscriberConfig()

    validation = validate_email(inp.email, cfg.max_email_length)
    if not validation.is_valid or validation.normalized_email is None:
        return SubscribeOutput(success=False, errors=validation.errors)

    email = validation.normalized_email
    name = inp.name.strip() if inp.name and inp.name.strip() else None

    try:
        existing = repo.get_by_email(email)
        if existing is None:
            subscriber = Subscriber(
                id=uuid4(),
                email=email,
                name=name,
                is_active=True,
                subscribed_at=clock.now_utc(),
            )
            if repo.add(subscriber):
                logger.info("New subscriber %s", subscriber.id)
                return SubscribeOutput(success=True, subscriber_id=subscriber.id)

            # A concurrent subscribe inserted the same address first.
            existing = repo.get_by_email(email)
            if existing is None:
                raise StoreError("email_subscribers.add")

        if existing.is_active:
            return SubscribeOutput(
                success=True,
                subscriber_id=existing.id,
                already_subscribed=True,
            )

        existing.is_active = True
        existing.unsubscribed_at = None
        existing.subscribed_at = clock.now_utc()
        if name:
            existing.name = name
        saved = repo.save(existing)
    except StoreError:
        logger.exception("Failed to subscribe %s", email)
        return SubscribeOutput(success=False, errors=[STORE_ERROR])

    logger.info("Reactivated subscriber %s", saved.id)
    return SubscribeOutput(success=True, subscriber_id=saved.id, reactivated=True)


def run_unsubscribe(
    inp: UnsubscribeInput,
    repo: SubscriberRepoPort,
    clock: ClockPort,
) -> UnsubscribeOutput:
    email = normalize_email(inp.email)
    if not email:
        return UnsubscribeOutput(
            success=False,
            errors=[ValidationError("EMPTY_EMAIL", "Email address is required", "email")],
        )

    try:
        subscriber = repo.get_by_email(email)
        if subscriber is None:
            return UnsubscribeOutput(
                success=False,
                errors=[
                    ValidationError(
                        "SUBSCRIBER_NOT_FOUND", "This address is not subscribed", "email"
                    )
                ],
            )

        if not subscriber.is_active:
            return UnsubscribeOutput(success=True, already_unsubscribed=True)

        subscriber.is_active = False
        subscriber.unsubscribed_at = clock.now_utc()
        repo.save(subscriber)
    except StoreError:
        logger.exception("Failed to unsubscribe %s", email)
        return UnsubscribeOutput(success=False, errors=[STORE_ERROR])

    logger.info("Unsubscribed %s", subscriber.id)
    return UnsubscribeOutput(success=True)


def run_list(inp: ListSubscribersInput, repo: SubscriberRepoPort) -> ListSubscribersOutput:
    limit = max(1, min(inp.limit, 1000))
    offset = max(0, inp.offset)
    search = inp.search.strip() if inp.search and inp.search.strip() else None

    try:
        subscribers, total = repo.list_filtered(
            is_active=inp.is_active, search=search, limit=limit, offset=offset
        )
    except StoreError:
        logger.exception("Failed to list subscribers")
        return ListSubscribersOutput(errors=[STORE_ERROR], success=False)

    return ListSubscribersOutput(subscribers=subscribers, total=total)


def run_list_active(repo: SubscriberRepoPort) -> list[Subscriber]:
    """Active subscribers for a fan-out. Raises StoreError."""
    return repo.list_active()


def run_stats(inp: StatsInput, repo: SubscriberRepoPort, clock: ClockPort) -> StatsOutput:
    _ = inp
    week_ago = clock.now_utc() - timedelta(days=7)
    try:
        stats = SubscriberStats(
            total=repo.count(),
            active=repo.count(is_active=True),
            inactive=repo.count(is_active=False),
            this_week=repo.count(since=week_ago),
        )
    except StoreError:
        logger.exception("Failed to count subscribers")
        return StatsOutput(errors=[STORE_ERROR], success=False)
    return StatsOutput(stats=stats)


def run_delete(inp: DeleteSubscriberInput, repo: SubscriberRepoPort) -> DeleteSubscriberOutput:
    try:
        deleted = repo.delete(inp.subscriber_id)
    except StoreError:
        logger.exception("Failed to delete subscriber %s", inp.subscriber_id)
        return DeleteSubscriberOutput(success=False, errors=[STORE_ERROR])

    if not deleted:
        return DeleteSubscriberOutput(
            success=False,
            errors=[ValidationError("SUBSCRIBER_NOT_FOUND", "Subscriber not found", None)],
        )
    logger.info("Deleted subscriber %s", inp.subscriber_id)
    return DeleteSubscriberOutput(success=True)


SubscriberInput = (
    SubscribeInput
    | UnsubscribeInput
    | ListSubscribersInput
    | StatsInput
    | DeleteSubscriberInput
)


def run(
    inp: SubscriberInput,
    *,
    repo: SubscriberRepoPort,
    clock: ClockPort,
    config: SubscriberConfig | None = None,
) -> (
    SubscribeOutput
    | UnsubscribeOutput
    | ListSubscribersOutput
    | StatsOutput
    | DeleteSubscriberOutput
):
    """Main entry point for the subscriber registry."""
    if isinstance(inp, SubscribeInput):
        return run_subscribe(inp, repo, clock, config=config)
    if isinstance(inp, UnsubscribeInput):
        return run_unsubscribe(inp, repo, clock)
    if isinstance(inp, ListSubscribersInput):
        return run_list(inp, repo)
    if isinstance(inp, StatsInput):
        return run_stats(inp, repo, clock)
    if isinstance(inp, DeleteSubscriberInput):
        return run_delete(inp, repo)
    raise ValueError(f"Unknown input type: {type(inp)}")
