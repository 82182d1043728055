"""
Notification dispatcher component.

Fans a published post out to every active subscriber.

Key behaviors:
- Subscribers are read once; that list is the receipt's recipient list
- One delivery task per recipient, drained from a queue in order
- A failing recipient is recorded and the queue moves on
- A receipt is written for every dispatch that got past the subscriber
  read, including an empty one
- The caller decides whether to dispatch at all
"""

from __future__ import annotations

import logging
from collections import deque
from uuid import uuid4

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
    EmailPort,
    ReceiptRepoPort,
)
from church_site.components.notifications.templates import (
    render_html,
    render_subject,
    render_text,
)
from church_site.core.ports.db import StoreError
from church_site.core.ports.email import EmailAddress, EmailError, EmailMessage

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    def __init__(
        self,
        subscribers: ActiveSubscriberReaderPort,
        receipts: ReceiptRepoPort,
        email: EmailPort,
        clock: ClockPort,
        config: NotificationConfig | None = None,
    ) -> None:
        self._subscribers = subscribers
        self._receipts = receipts
        self._email = email
        self._clock = clock
        self._config = config or NotificationConfig()

    def run(self, inp: DispatchInput | ListReceiptsInput) -> DispatchOutput | ListReceiptsOutput:
        if isinstance(inp, DispatchInput):
            return self.dispatch(inp.payload)
        elif isinstance(inp, ListReceiptsInput):
            return self.list_receipts(inp)
        else:
            raise TypeError(f"Unknown input type: {type(inp)}")

    def dispatch(self, payload: NotificationPayload) -> DispatchOutput:
        try:
            subscribers = self._subscribers.list_active()
        except StoreError:
            logger.exception("Could not read subscribers for %r", payload.title)
            return DispatchOutput(
                errors=[
                    NotificationError("STORE_ERROR", "Could not read the subscriber list")
                ],
                success=False,
            )

        queue: deque[DeliveryTask] = deque(
            DeliveryTask(recipient=s.email, name=s.name) for s in subscribers
        )
        recipients = [task.recipient for task in queue]

        subject = render_subject(payload, self._config)
        body_html = render_html(payload, self._config)
        body_text = render_text(payload, self._config)

        deliveries: list[DeliveryOutcome] = []
        while queue:
            task = queue.popleft()
            deliveries.append(self._deliver(task, subject, body_html, body_text))

        delivered = sum(1 for d in deliveries if d.status == "delivered")
        failed = len(deliveries) - delivered

        receipt = NotificationReceipt(
            id=uuid4(),
            title=payload.title,
            content=payload.content,
            type=payload.type,
            published_at=payload.published_at,
            sent_at=self._clock.now_utc(),
            recipient_count=len(recipients),
            recipients=recipients,
            delivered_count=delivered,
            failed_count=failed,
            deliveries=deliveries,
        )

        errors: list[NotificationError] = []
        try:
            receipt = self._receipts.save(receipt)
        except StoreError:
            logger.exception("Failed to write notification receipt %s", receipt.id)
            errors.append(
                NotificationError("STORE_ERROR", "Notification receipt could not be saved")
            )

        if recipients and delivered == 0:
            errors.append(
                NotificationError(
                    "TRANSPORT_FAILED",
                    f"No notification could be delivered ({failed} failed)",
                )
            )

        logger.info(
            "Dispatched %r to %d recipient(s): %d delivered, %d failed",
            payload.title,
            len(recipients),
            delivered,
            failed,
        )
        return DispatchOutput(
            receipt=receipt,
            delivered_count=delivered,
            failed_count=failed,
            errors=errors,
            success=not errors,
        )

    def _deliver(
        self, task: DeliveryTask, subject: str, body_html: str, body_text: str
    ) -> DeliveryOutcome:
        try:
            message = EmailMessage(
                recipient=EmailAddress(task.recipient, task.name),
                subject=subject,
                body_html=body_html,
                body_text=body_text,
                sender=self._config.sender,
                reply_to=self._config.reply_to,
            )
            result = self._email.send(message)
        except (EmailError, ValueError) as e:
            logger.warning("Notification to %s failed: %s", task.recipient, e)
            return DeliveryOutcome(recipient=task.recipient, status="failed", error=str(e))

        if not result.delivered:
            logger.warning("Notification to %s failed: %s", task.recipient, result.error)
            return DeliveryOutcome(
                recipient=task.recipient,
                status="failed",
                message_id=result.message_id,
                error=result.error,
            )
        return DeliveryOutcome(
            recipient=task.recipient, status="delivered", message_id=result.message_id
        )

    def list_receipts(self, inp: ListReceiptsInput) -> ListReceiptsOutput:
        try:
            receipts = self._receipts.list_recent(limit=max(1, inp.limit))
        except StoreError:
            logger.exception("Failed to list notification receipts")
            return ListReceiptsOutput(
                errors=[NotificationError("STORE_ERROR", "Could not read receipts")],
                success=False,
            )
        return ListReceiptsOutput(receipts=receipts)
