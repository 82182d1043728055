"""Subscriber registry component - email list for post notifications."""

from church_site.components.subscribers.component import (
    EMAIL_REGEX,
    normalize_email,
    run,
    run_delete,
    run_list,
    run_list_active,
    run_stats,
    run_subscribe,
    run_unsubscribe,
    validate_email,
)
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

__all__ = [
    # Entry points
    "run",
    "run_subscribe",
    "run_unsubscribe",
    "run_list",
    "run_list_active",
    "run_stats",
    "run_delete",
    # Pure functions
    "validate_email",
    "normalize_email",
    "EMAIL_REGEX",
    # Models
    "Subscriber",
    "SubscriberConfig",
    "SubscriberStats",
    "SubscribeInput",
    "SubscribeOutput",
    "UnsubscribeInput",
    "UnsubscribeOutput",
    "ListSubscribersInput",
    "ListSubscribersOutput",
    "StatsInput",
    "StatsOutput",
    "DeleteSubscriberInput",
    "DeleteSubscriberOutput",
    "ValidateEmailOutput",
    "ValidationError",
    # Ports
    "SubscriberRepoPort",
    "ClockPort",
]
