"""
Notification dispatcher models.

A dispatch fans one payload out to every active subscriber, one
delivery task per recipient, and always ends with a receipt recording
exactly who was addressed and how each delivery went.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal
from uuid import UUID

from church_site.core.ports.email import EmailAddress

DeliveryStatus = Literal["delivered", "failed"]


@dataclass(frozen=True)
class NotificationConfig:
    """Rendering and sender settings, filled from the `notifications` rules section."""

    subject_prefix: str = "[church-news]"
    site_name: str = "Church"
    site_url: str = "http://localhost:8000"
    sender: EmailAddress | None = None
    reply_to: EmailAddress | None = None
    type_labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class NotificationPayload:
    title: str
    content: str
    type: str
    published_at: datetime


@dataclass(frozen=True)
class DeliveryTask:
    """One queued send."""

    recipient: str
    name: str | None = None


@dataclass(frozen=True)
class DeliveryOutcome:
    recipient: str
    status: DeliveryStatus
    message_id: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class NotificationReceipt:
    """
    Immutable record of one fan-out attempt.

    `recipients` is the exact address list read at send time, in send order.
    """

    id: UUID
    title: str
    content: str
    type: str
    published_at: datetime
    sent_at: datetime
    recipient_count: int
    recipients: list[str] = field(default_factory=list)
    delivered_count: int = 0
    failed_count: int = 0
    deliveries: list[DeliveryOutcome] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.recipient_count != len(self.recipients):
            raise ValueError("recipient_count must equal the number of recipients")
        if self.delivered_count + self.failed_count != len(self.deliveries):
            raise ValueError("delivery counts must match the recorded outcomes")


# --- Inputs ---


@dataclass(frozen=True)
class DispatchInput:
    payload: NotificationPayload


@dataclass(frozen=True)
class ListReceiptsInput:
    limit: int = 50


# --- Outputs ---


@dataclass(frozen=True)
class NotificationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class DispatchOutput:
    receipt: NotificationReceipt | None = None
    delivered_count: int = 0
    failed_count: int = 0
    errors: list[NotificationError] = field(default_factory=list)
    success: bool = False


@dataclass(frozen=True)
class ListReceiptsOutput:
    receipts: list[NotificationReceipt] = field(default_factory=list)
    errors: list[NotificationError] = field(default_factory=list)
    success: bool = True
