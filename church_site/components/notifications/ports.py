"""Notification dispatcher ports."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from church_site.components.notifications.models import NotificationReceipt
from church_site.components.subscribers.models import Subscriber
from church_site.core.ports.email import EmailPort

__all__ = ["ActiveSubscriberReaderPort", "ReceiptRepoPort", "ClockPort", "EmailPort"]


class ActiveSubscriberReaderPort(Protocol):
    def list_active(self) -> list[Subscriber]:
        """Active subscribers at the time of the call. May raise StoreError."""
        ...


class ReceiptRepoPort(Protocol):
    """Append-only receipt log. May raise StoreError."""

    def save(self, receipt: NotificationReceipt) -> NotificationReceipt: ...

    def list_recent(self, limit: int = 50) -> list[NotificationReceipt]:
        """Receipts, newest `sent_at` first."""
        ...


class ClockPort(Protocol):
    def now_utc(self) -> datetime: ...
