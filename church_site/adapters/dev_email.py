"""
Dev email adapter.

Logs notification emails instead of sending them. Used whenever no
RESEND_API_KEY is configured, and by the tests.

Key behaviors:
- Returns SKIPPED (counted as delivered by the dispatcher)
- Keeps every message in memory for test assertions
- `fail_for` makes chosen recipients fail, to exercise partial outcomes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

from church_site.core.ports.email import EmailMessage, EmailResult, EmailSendError

logger = logging.getLogger(__name__)


@dataclass
class SentEmail:
    """Record of a logged email for test assertions."""

    id: str
    recipient: str
    subject: str
    body_html: str
    body_text: str
    sender: str | None
    logged_at: datetime


@dataclass
class DevEmailAdapter:
    sent_emails: list[SentEmail] = field(default_factory=list)

    log_level: int = logging.INFO
    body_preview_length: int = 100
    fail_for: set[str] = field(default_factory=set)

    def send(self, message: EmailMessage) -> EmailResult:
        recipient = message.recipient.email
        if recipient in self.fail_for:
            raise EmailSendError(recipient, "Simulated transport failure", retriable=False)

        message_id = f"dev-{uuid4().hex[:12]}"
        sender = str(message.sender) if message.sender else None

        self.sent_emails.append(
            SentEmail(
                id=message_id,
                recipient=recipient,
                subject=message.subject,
                body_html=message.body_html,
                body_text=message.body_text,
                sender=sender,
                logged_at=datetime.now(UTC),
            )
        )

        preview = message.body_text[: self.body_preview_length]
        if len(message.body_text) > self.body_preview_length:
            preview += "..."
        logger.log(
            self.log_level,
            "EMAIL (dev): To=%s, Subject=%s, From=%s, Body=%s, MessageID=%s",
            recipient,
            message.subject,
            sender,
            preview,
            message_id,
        )

        return EmailResult.skipped(
            recipient, message_id=message_id, reason="Dev mode - email logged, not sent"
        )

    # --- Test Helper Methods ---

    def get_last_email(self) -> SentEmail | None:
        return self.sent_emails[-1] if self.sent_emails else None

    def get_emails_to(self, recipient: str) -> list[SentEmail]:
        return [e for e in self.sent_emails if e.recipient == recipient]

    def clear(self) -> None:
        self.sent_emails.clear()

    @property
    def email_count(self) -> int:
        return len(self.sent_emails)
