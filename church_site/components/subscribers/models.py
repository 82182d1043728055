"""
Subscriber registry models.

A subscriber row is keyed by its normalized email. Unsubscribing only
deactivates the row; subscribing again reactivates the same row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

# --- Entity ---


@dataclass
class Subscriber:
    """Email subscriber entity."""

    id: UUID
    email: str  # Lower-cased and trimmed
    name: str | None = None
    is_active: bool = True
    subscribed_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    unsubscribed_at: datetime | None = None


@dataclass(frozen=True)
class SubscriberConfig:
    """Registry configuration, filled from the `subscribers` rules section."""

    max_email_length: int = 254


# --- Input Models ---


@dataclass(frozen=True)
class SubscribeInput:
    email: str
    name: str | None = None


@dataclass(frozen=True)
class UnsubscribeInput:
    email: str


@dataclass(frozen=True)
class ListSubscribersInput:
    """Admin listing; `is_active=None` returns both active and inactive rows."""

    is_active: bool | None = None
    search: str | None = None  # Substring of email or name
    limit: int = 100
    offset: int = 0


@dataclass(frozen=True)
class DeleteSubscriberInput:
    subscriber_id: UUID


@dataclass(frozen=True)
class StatsInput:
    pass


# --- Output Models ---


@dataclass(frozen=True)
class ValidationError:
    """Validation error detail."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class ValidateEmailOutput:
    is_valid: bool
    normalized_email: str | None = None
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class SubscribeOutput:
    success: bool
    subscriber_id: UUID | None = None
    already_subscribed: bool = False
    reactivated: bool = False
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class UnsubscribeOutput:
    success: bool
    already_unsubscribed: bool = False
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class ListSubscribersOutput:
    subscribers: list[Subscriber] = field(default_factory=list)
    total: int = 0
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DeleteSubscriberOutput:
    success: bool
    errors: list[ValidationError] = field(default_factory=list)


@dataclass(frozen=True)
class SubscriberStats:
    total: int = 0
    active: int = 0
    inactive: int = 0
    this_week: int = 0  # Subscribed within the last 7 days


@dataclass(frozen=True)
class StatsOutput:
    stats: SubscriberStats = field(default_factory=SubscriberStats)
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True
