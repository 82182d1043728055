"""
Public newsletter endpoints.

Endpoints:
- POST /api/public/newsletter/subscribe
- POST /api/public/newsletter/unsubscribe
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from church_site.adapters.clock import SystemClock
from church_site.adapters.sqlite.repos import SQLiteSubscriberRepo
from church_site.api.deps import get_clock, get_subscriber_config, get_subscriber_repo
from church_site.api.schemas import raise_for_errors
from church_site.components.subscribers import (
    SubscribeInput,
    SubscriberConfig,
    UnsubscribeInput,
    run_subscribe,
    run_unsubscribe,
)

router = APIRouter()


class SubscribeRequest(BaseModel):
    email: str
    name: str | None = None


class UnsubscribeRequest(BaseModel):
    email: str


class SubscriptionResponse(BaseModel):
    success: bool
    message: str


@router.post("/subscribe", response_model=SubscriptionResponse)
def subscribe(
    body: SubscribeRequest,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    clock: SystemClock = Depends(get_clock),
    config: SubscriberConfig = Depends(get_subscriber_config),
) -> SubscriptionResponse:
    result = run_subscribe(
        SubscribeInput(email=body.email, name=body.name), repo, clock, config=config
    )
    raise_for_errors(result.errors)

    if result.already_subscribed:
        message = "This address is already subscribed"
    elif result.reactivated:
        message = "Welcome back, your subscription is active again"
    else:
        message = "Subscribed"
    return SubscriptionResponse(success=True, message=message)


@router.post("/unsubscribe", response_model=SubscriptionResponse)
def unsubscribe(
    body: UnsubscribeRequest,
    repo: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    clock: SystemClock = Depends(get_clock),
) -> SubscriptionResponse:
    result = run_unsubscribe(UnsubscribeInput(email=body.email), repo, clock)
    raise_for_errors(result.errors)
    return SubscriptionResponse(success=True, message="Unsubscribed")
