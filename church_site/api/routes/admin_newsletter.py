"""
Admin newsletter endpoints.

Endpoints:
- GET /api/admin/newsletter/subscribers - List subscribers
- GET /api/admin/newsletter/subscribers/stats - Counts
- DELETE /api/admin/newsletter/subscribers/{id} - Delete subscriber
- POST /api/admin/newsletter/send - Send a newsletter to all active subscribers
- GET /api/admin/newsletter/receipts - Fan-out receipts, newest first
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from church_site.adapters.clock import SystemClock
from church_site.adapters.sqlite.repos import SQLiteSubscriberRepo
from church_site.api.deps import get_clock, get_dispatcher, get_subscriber_repo, require_admin
from church_site.api.routes.admin_posts import NotificationSummary, notification_summary
from church_site.api.schemas import ErrorResponse, raise_for_errors
from church_site.components.auth import AdminIdentity
from church_site.components.notifications import (
    ListReceiptsInput,
    NotificationDispatcher,
    NotificationPayload,
    NotificationReceipt,
)
from church_site.components.subscribers import (
    DeleteSubscriberInput,
    ListSubscribersInput,
    StatsInput,
    Subscriber,
    run_delete,
    run_list,
    run_stats,
)

router = APIRouter()


# --- Request/Response Models ---


class SubscriberResponse(BaseModel):
    id: str
    email: str
    name: str | None = None
    is_active: bool
    subscribed_at: str
    unsubscribed_at: str | None = None


class SubscriberListResponse(BaseModel):
    subscribers: list[SubscriberResponse]
    total: int = Field(..., description="Total matching subscribers")
    offset: int
    limit: int


class StatsResponse(BaseModel):
    total: int
    active: int
    inactive: int
    this_week: int


class NewsletterRequest(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    type: str = "general"


class DeliveryResponse(BaseModel):
    recipient: str
    status: str
    message_id: str | None = None
    error: str | None = None


class ReceiptResponse(BaseModel):
    id: str
    title: str
    type: str
    published_at: str
    sent_at: str
    recipient_count: int
    delivered_count: int
    failed_count: int
    recipients: list[str]
    deliveries: list[DeliveryResponse]


# --- Helper Functions ---


def _subscriber_to_response(subscriber: Subscriber) -> SubscriberResponse:
    return SubscriberResponse(
        id=str(subscriber.id),
        email=subscriber.email,
        name=subscriber.name,
        is_active=subscriber.is_active,
        subscribed_at=subscriber.subscribed_at.isoformat(),
        unsubscribed_at=(
            subscriber.unsubscribed_at.isoformat() if subscriber.unsubscribed_at else None
        ),
    )


def _receipt_to_response(receipt: NotificationReceipt) -> ReceiptResponse:
    return ReceiptResponse(
        id=str(receipt.id),
        title=receipt.title,
        type=receipt.type,
        published_at=receipt.published_at.isoformat(),
        sent_at=receipt.sent_at.isoformat(),
        recipient_count=receipt.recipient_count,
        delivered_count=receipt.delivered_count,
        failed_count=receipt.failed_count,
        recipients=list(receipt.recipients),
        deliveries=[
            DeliveryResponse(
                recipient=d.recipient, status=d.status, message_id=d.message_id, error=d.error
            )
            for d in receipt.deliveries
        ],
    )


# --- Endpoints ---


@router.get("/subscribers", response_model=SubscriberListResponse)
def list_subscribers(
    is_active: bool | None = Query(None, description="Filter by activity"),
    search: str | None = Query(None, description="Substring of email or name"),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=500),
    admin: AdminIdentity = Depends(require_admin),
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
) -> SubscriberListResponse:
    result = run_list(
        ListSubscribersInput(is_active=is_active, search=search, limit=limit, offset=offset),
        repo,
    )
    raise_for_errors(result.errors)
    return SubscriberListResponse(
        subscribers=[_subscriber_to_response(s) for s in result.subscribers],
        total=result.total,
        offset=offset,
        limit=limit,
    )


@router.get("/subscribers/stats", response_model=StatsResponse)
def subscriber_stats(
    admin: AdminIdentity = Depends(require_admin),
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    clock: SystemClock = Depends(get_clock),
) -> StatsResponse:
    result = run_stats(StatsInput(), repo, clock)
    raise_for_errors(result.errors)
    s = result.stats
    return StatsResponse(total=s.total, active=s.active, inactive=s.inactive, this_week=s.this_week)


@router.delete(
    "/subscribers/{subscriber_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
def delete_subscriber(
    subscriber_id: UUID,
    admin: AdminIdentity = Depends(require_admin),
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
) -> None:
    result = run_delete(DeleteSubscriberInput(subscriber_id=subscriber_id), repo)
    raise_for_errors(result.errors)


@router.post("/send", response_model=NotificationSummary)
def send_newsletter(
    body: NewsletterRequest,
    admin: AdminIdentity = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
    clock: SystemClock = Depends(get_clock),
) -> NotificationSummary:
    """Send a one-off newsletter; the response reports partial outcomes."""
    result = dispatcher.dispatch(
        NotificationPayload(
            title=body.title,
            content=body.content,
            type=body.type,
            published_at=clock.now_utc(),
        )
    )
    if result.receipt is None:
        raise_for_errors(result.errors)
    return notification_summary(result)


@router.get("/receipts", response_model=list[ReceiptResponse])
def list_receipts(
    limit: int = Query(50, ge=1, le=500),
    admin: AdminIdentity = Depends(require_admin),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> list[ReceiptResponse]:
    result = dispatcher.list_receipts(ListReceiptsInput(limit=limit))
    raise_for_errors(result.errors)
    return [_receipt_to_response(r) for r in result.receipts]
