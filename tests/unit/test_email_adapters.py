"""
Email port and adapter tests.

Tests cover:
1. EmailMessage validation
2. DevEmailAdapter logging, storage and simulated failures
3. ResendEmailAdapter request shape and error mapping (httpx.MockTransport)
"""

from __future__ import annotations

import json
import logging

import httpx
import pytest

from church_site.adapters.dev_email import DevEmailAdapter
from church_site.adapters.resend_email import ResendEmailAdapter
from church_site.api import deps
from church_site.core.ports.email import (
    EmailAddress,
    EmailConfigurationError,
    EmailMessage,
    EmailResult,
    EmailSendError,
    EmailStatus,
)

SENDER = EmailAddress("news@church.example", "Church Office")


def message(recipient: str = "member@example.com", **overrides: object) -> EmailMessage:
    fields: dict[str, object] = {
        "recipient": EmailAddress(recipient, "Member"),
        "subject": "[church-news] Picnic",
        "body_html": "<p>Picnic on Sunday</p>",
        "body_text": "Picnic on Sunday",
    }
    fields.update(overrides)
    return EmailMessage(**fields)  # type: ignore[arg-type]


class TestEmailMessage:
    def test_requires_recipient(self) -> None:
        with pytest.raises(ValueError, match="Recipient"):
            message(recipient="")

    def test_requires_subject(self) -> None:
        with pytest.raises(ValueError, match="Subject"):
            message(subject="")

    def test_requires_a_body(self) -> None:
        with pytest.raises(ValueError):
            message(body_html="", body_text="")

    def test_address_formatting(self) -> None:
        assert str(EmailAddress("a@example.com")) == "a@example.com"
        assert str(EmailAddress("a@example.com", 'The "A"')) == '"The \\"A\\"" <a@example.com>'

    def test_skipped_counts_as_delivered(self) -> None:
        assert EmailResult.skipped("a@example.com").delivered
        assert EmailResult.success("a@example.com").delivered
        assert not EmailResult.failed("a@example.com", "nope").delivered


class TestDevEmailAdapter:
    def test_send_returns_skipped(self) -> None:
        """Dev adapter logs, it never sends."""
        result = DevEmailAdapter().send(message())

        assert result.status == EmailStatus.SKIPPED
        assert result.message_id is not None
        assert result.message_id.startswith("dev-")

    def test_stores_messages(self) -> None:
        adapter = DevEmailAdapter()
        adapter.send(message("a@example.com"))
        adapter.send(message("b@example.com", sender=SENDER))

        assert adapter.email_count == 2
        last = adapter.get_last_email()
        assert last is not None
        assert last.recipient == "b@example.com"
        assert last.sender == '"Church Office" <news@church.example>'
        assert len(adapter.get_emails_to("a@example.com")) == 1

        adapter.clear()
        assert adapter.get_last_email() is None

    def test_logs_preview(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = DevEmailAdapter(body_preview_length=5)

        with caplog.at_level(logging.INFO, logger="church_site.adapters.dev_email"):
            adapter.send(message())

        assert "member@example.com" in caplog.text
        assert "Picni..." in caplog.text

    def test_fail_for_raises(self) -> None:
        adapter = DevEmailAdapter(fail_for={"bad@example.com"})

        with pytest.raises(EmailSendError) as exc:
            adapter.send(message("bad@example.com"))

        assert exc.value.recipient == "bad@example.com"
        assert adapter.email_count == 0


class TestResendEmailAdapter:
    def make(self, handler) -> ResendEmailAdapter:  # type: ignore[no-untyped-def]
        client = httpx.Client(
            base_url="https://api.resend.test", transport=httpx.MockTransport(handler)
        )
        return ResendEmailAdapter("re_test_key", SENDER, client=client)

    def test_missing_key(self) -> None:
        with pytest.raises(EmailConfigurationError):
            ResendEmailAdapter("", SENDER)

    def test_posts_message(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "re-123"})

        result = self.make(handler).send(
            message(reply_to=EmailAddress("office@church.example"))
        )

        assert result.status == EmailStatus.SENT
        assert result.message_id == "re-123"
        request = seen[0]
        assert request.url.path == "/emails"
        assert request.headers["Authorization"] == "Bearer re_test_key"
        body = json.loads(request.content)
        assert body["from"] == '"Church Office" <news@church.example>'
        assert body["to"] == ['"Member" <member@example.com>']
        assert body["reply_to"] == "office@church.example"
        assert body["text"] == "Picnic on Sunday"

    def test_message_sender_overrides_default(self) -> None:
        seen: list[dict[str, object]] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "re-1"})

        self.make(handler).send(message(sender=EmailAddress("pastor@church.example")))

        assert seen[0]["from"] == "pastor@church.example"

    def test_client_error_is_failed_result(self) -> None:
        adapter = self.make(lambda request: httpx.Response(422, text="invalid to"))

        result = adapter.send(message())

        assert result.status == EmailStatus.FAILED
        assert "422" in (result.error or "")

    def test_server_error_raises(self) -> None:
        adapter = self.make(lambda request: httpx.Response(503, text="down"))

        with pytest.raises(EmailSendError):
            adapter.send(message())

    def test_rate_limit_raises(self) -> None:
        adapter = self.make(lambda request: httpx.Response(429, text="slow down"))

        with pytest.raises(EmailSendError):
            adapter.send(message())

    def test_network_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("no route", request=request)

        with pytest.raises(EmailSendError, match="request failed"):
            self.make(handler).send(message())

    def test_close_adapters_closes_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        adapter = self.make(lambda request: httpx.Response(200, json={"id": "m"}))
        monkeypatch.setattr(deps, "_email_adapter_instance", adapter)

        deps.close_adapters()

        assert adapter._client.is_closed
        assert deps._email_adapter_instance is None
