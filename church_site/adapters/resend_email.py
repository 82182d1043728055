"""
Resend email adapter.

Sends one message per call through the Resend HTTP API
(https://resend.com/docs/api-reference/emails/send-email).
"""

from __future__ import annotations

import logging

import httpx

from church_site.core.ports.email import (
    EmailAddress,
    EmailConfigurationError,
    EmailMessage,
    EmailResult,
    EmailSendError,
)

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com"


class ResendEmailAdapter:
    def __init__(
        self,
        api_key: str,
        default_sender: EmailAddress,
        *,
        base_url: str = RESEND_API_URL,
        timeout_seconds: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise EmailConfigurationError("RESEND_API_KEY is not set")
        self.default_sender = default_sender
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout_seconds),
        )
        self._headers = {"Authorization": f"Bearer {api_key}"}

    def send(self, message: EmailMessage) -> EmailResult:
        recipient = message.recipient.email
        sender = message.sender or self.default_sender
        body: dict[str, object] = {
            "from": str(sender),
            "to": [str(message.recipient)],
            "subject": message.subject,
            "html": message.body_html,
            "text": message.body_text,
        }
        if message.reply_to:
            body["reply_to"] = str(message.reply_to)
        if message.headers:
            body["headers"] = message.headers

        try:
            response = self._client.post("/emails", json=body, headers=self._headers)
        except httpx.HTTPError as e:
            raise EmailSendError(recipient, f"Resend request failed: {e}") from e

        if response.status_code >= 500 or response.status_code == 429:
            raise EmailSendError(
                recipient, f"Resend returned {response.status_code}: {response.text}"
            )
        if response.status_code >= 400:
            logger.warning(
                "Resend rejected message to %s (%s): %s",
                recipient,
                response.status_code,
                response.text,
            )
            return EmailResult.failed(
                recipient, f"Resend returned {response.status_code}: {response.text}"
            )

        message_id = response.json().get("id")
        return EmailResult.success(recipient, message_id=message_id)

    def close(self) -> None:
        self._client.close()
