"""Notification dispatcher component - emails published posts to subscribers."""

from church_site.components.notifications.component import NotificationDispatcher
from church_site.components.notifications.models import (
    DeliveryOutcome,
    DeliveryTask,
    DispatchInput,
    DispatchOutput,
    ListReceiptsInput,
    ListReceiptsOutput,
    NotificationConfig,
    NotificationError,
    NotificationPayload,
    NotificationReceipt,
)
from church_site.components.notifications.ports import (
    ActiveSubscriberReaderPort,
    ClockPort,
    ReceiptRepoPort,
)
from church_site.components.notifications.templates import (
    render_html,
    render_subject,
    render_text,
)

__all__ = [
    "NotificationDispatcher",
    # Models
    "DeliveryOutcome",
    "DeliveryTask",
    "DispatchInput",
    "DispatchOutput",
    "ListReceiptsInput",
    "ListReceiptsOutput",
    "NotificationConfig",
    "NotificationError",
    "NotificationPayload",
    "NotificationReceipt",
    # Ports
    "ActiveSubscriberReaderPort",
    "ClockPort",
    "ReceiptRepoPort",
    # Templates
    "render_html",
    "render_subject",
    "render_text",
]
