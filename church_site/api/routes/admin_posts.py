"""
Admin post endpoints.

Endpoints:
- GET /api/admin/posts - All posts, newest first
- GET /api/admin/posts/{id} - Any post, whatever its status
- POST /api/admin/posts - Create
- PUT /api/admin/posts/{id} - Replace editable fields and status
- DELETE /api/admin/posts/{id} - Delete
- POST /api/admin/posts/promote-due - Publish scheduled posts whose time has come

Create and update take `announce`: when the saved post is published and
`announce` is true, subscribers are notified and the receipt summary is
returned alongside the post.
"""

from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from church_site.api.deps import get_dispatcher, get_post_manager, require_admin
from church_site.api.schemas import (
    ErrorResponse,
    PostListResponse,
    PostResponse,
    post_to_response,
    raise_for_errors,
)
from church_site.components.auth import AdminIdentity
from church_site.components.notifications import (
    DispatchOutput,
    NotificationDispatcher,
    NotificationPayload,
)
from church_site.components.posts import (
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ListAllInput,
    PostLifecycleManager,
    PromoteDueInput,
    UpdatePostInput,
)
from church_site.domain.entities import Post

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Request/Response Models ---


class PostRequest(BaseModel):
    title: str
    content: str
    type: str = "general"
    status: str = "draft"
    category: str = "general"
    scheduled_for: datetime | None = None
    cover_image_url: str | None = None
    attachment_url: str | None = None
    attachment_name: str | None = None
    announce: bool = Field(False, description="Email subscribers if the post ends up published")


class NotificationSummary(BaseModel):
    receipt_id: str | None = None
    recipient_count: int = 0
    delivered_count: int = 0
    failed_count: int = 0
    success: bool
    errors: list[str] = Field(default_factory=list)


class PostSaveResponse(BaseModel):
    post: PostResponse
    notification: NotificationSummary | None = None


class PromoteDueResponse(BaseModel):
    count: int
    promoted_ids: list[str]
    errors: list[str] = Field(default_factory=list)


# --- Helpers ---


def notification_summary(result: DispatchOutput) -> NotificationSummary:
    receipt = result.receipt
    return NotificationSummary(
        receipt_id=str(receipt.id) if receipt else None,
        recipient_count=receipt.recipient_count if receipt else 0,
        delivered_count=result.delivered_count,
        failed_count=result.failed_count,
        success=result.success,
        errors=[f"{e.code}: {e.message}" for e in result.errors],
    )


def _announce(post: Post, dispatcher: NotificationDispatcher) -> NotificationSummary:
    assert post.published_at is not None
    result = dispatcher.dispatch(
        NotificationPayload(
            title=post.title,
            content=post.content,
            type=post.type,
            published_at=post.published_at,
        )
    )
    if not result.success:
        logger.warning("Announcement of post %s incomplete: %s", post.id, result.errors)
    return notification_summary(result)


# --- Endpoints ---


@router.get("", response_model=PostListResponse)
def list_posts(
    include_drafts: bool = Query(True),
    admin: AdminIdentity = Depends(require_admin),
    manager: PostLifecycleManager = Depends(get_post_manager),
) -> PostListResponse:
    result = manager.list_all(ListAllInput(include_drafts=include_drafts))
    raise_for_errors(result.errors)
    return PostListResponse(
        posts=[post_to_response(p) for p in result.posts], count=len(result.posts)
    )


@router.post("/promote-due", response_model=PromoteDueResponse)
def promote_due_posts(
    admin: AdminIdentity = Depends(require_admin),
    manager: PostLifecycleManager = Depends(get_post_manager),
) -> PromoteDueResponse:
    result = manager.promote_due(PromoteDueInput())
    if not result.promoted_ids:
        raise_for_errors(result.errors)
    return PromoteDueResponse(
        count=result.count,
        promoted_ids=[str(i) for i in result.promoted_ids],
        errors=[e.message for e in result.errors],
    )


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_post(
    post_id: UUID,
    admin: AdminIdentity = Depends(require_admin),
    manager: PostLifecycleManager = Depends(get_post_manager),
) -> PostResponse:
    result = manager.get(GetPostInput(post_id=post_id))
    raise_for_errors(result.errors)
    assert result.post is not None
    return post_to_response(result.post)


@router.post(
    "",
    response_model=PostSaveResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def create_post(
    body: PostRequest,
    admin: AdminIdentity = Depends(require_admin),
    manager: PostLifecycleManager = Depends(get_post_manager),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> PostSaveResponse:
    result = manager.create(
        CreatePostInput(
            title=body.title,
            content=body.content,
            type=body.type,
            status=body.status,
            category=body.category,
            author_email=admin.email,
            author_name=admin.display_name,
            cover_image_url=body.cover_image_url,
            attachment_url=body.attachment_url,
            attachment_name=body.attachment_name,
            scheduled_for=body.scheduled_for,
        )
    )
    raise_for_errors(result.errors)
    assert result.post is not None

    notification = None
    if body.announce and result.post.status == "published":
        notification = _announce(result.post, dispatcher)
    return PostSaveResponse(post=post_to_response(result.post), notification=notification)


@router.put(
    "/{post_id}",
    response_model=PostSaveResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_post(
    post_id: UUID,
    body: PostRequest,
    admin: AdminIdentity = Depends(require_admin),
    manager: PostLifecycleManager = Depends(get_post_manager),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
) -> PostSaveResponse:
    existing = manager.get(GetPostInput(post_id=post_id))
    raise_for_errors(existing.errors)
    assert existing.post is not None

    result = manager.update(
        UpdatePostInput(
            post_id=post_id,
            title=body.title,
            content=body.content,
            type=body.type,
            status=body.status,
            category=body.category,
            author_email=existing.post.author_email or admin.email,
            author_name=existing.post.author_name or admin.display_name,
            cover_image_url=body.cover_image_url,
            attachment_url=body.attachment_url,
            attachment_name=body.attachment_name,
            scheduled_for=body.scheduled_for,
        )
    )
    raise_for_errors(result.errors)
    assert result.post is not None

    notification = None
    if body.announce and result.post.status == "published":
        notification = _announce(result.post, dispatcher)
    return PostSaveResponse(post=post_to_response(result.post), notification=notification)


@router.delete(
    "/{post_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
def delete_post(
    post_id: UUID,
    admin: AdminIdentity = Depends(require_admin),
    manager: PostLifecycleManager = Depends(get_post_manager),
) -> None:
    result = manager.delete(DeletePostInput(post_id=post_id))
    raise_for_errors(result.errors)
