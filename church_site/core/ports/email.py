"""
Mail transport interface.

Protocol for handing one rendered message to a mail provider. The
notification dispatcher builds messages and calls `send` once per
recipient; adapters decide how the message actually leaves the process.

Implementation strategies:
1. DevEmailAdapter: logs messages (dev/test, no API key configured)
2. ResendEmailAdapter: posts to the Resend HTTP API

Adapters may either return a FAILED result or raise an EmailError for a
single recipient; the dispatcher records both as a failed delivery.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter: logged, not delivered


@dataclass(frozen=True)
class EmailAddress:
    """
    Email address with optional display name.

    Examples:
        EmailAddress("news@church.example")
        EmailAddress("news@church.example", "Church Office")
    """

    email: str
    name: str | None = None

    def __str__(self) -> str:
        """Format as RFC 5322 address."""
        if self.name:
            safe_name = self.name.replace('"', '\\"')
            return f'"{safe_name}" <{self.email}>'
        return self.email


@dataclass(frozen=True)
class EmailMessage:
    """A rendered message for a single recipient."""

    recipient: EmailAddress
    subject: str
    body_html: str
    body_text: str
    sender: EmailAddress | None = None  # None = adapter default
    reply_to: EmailAddress | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.recipient.email:
            raise ValueError("Recipient email is required")
        if not self.subject:
            raise ValueError("Subject is required")
        if not self.body_html and not self.body_text:
            raise ValueError("At least one of body_html or body_text is required")


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @property
    def delivered(self) -> bool:
        """SKIPPED counts as delivered: the transport accepted the message."""
        return self.status in (EmailStatus.SENT, EmailStatus.SKIPPED)

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(
        cls, recipient: str, message_id: str | None = None, reason: str = "Dev mode"
    ) -> EmailResult:
        return cls(
            status=EmailStatus.SKIPPED,
            message_id=message_id,
            recipient=recipient,
            error=reason,
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        return cls(
            status=EmailStatus.FAILED,
            recipient=recipient,
            error=error,
        )


class EmailPort(Protocol):
    """Mail transport used by the notification dispatcher."""

    def send(self, message: EmailMessage) -> EmailResult:
        """
        Hand one message to the transport.

        Returns:
            EmailResult with the send outcome for `message.recipient`.
        """
        ...


# --- Error Types ---


class EmailError(Exception):
    """Base exception for email-related errors."""


class EmailSendError(EmailError):
    """The transport rejected or could not deliver a message."""

    def __init__(self, recipient: str, error: str, retriable: bool = True) -> None:
        self.recipient = recipient
        self.error = error
        self.retriable = retriable
        super().__init__(f"Failed to send email to {recipient}: {error}")


class EmailConfigurationError(EmailError):
    """The transport is missing credentials or sender settings."""
