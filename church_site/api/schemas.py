"""Response models and error mapping shared by the API routes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from fastapi import HTTPException, status
from pydantic import BaseModel, Field

from church_site.domain.entities import Post


class _ComponentError(Protocol):
    code: str
    message: str
    field: str | None


class ErrorResponse(BaseModel):
    detail: str


class FieldError(BaseModel):
    code: str
    message: str
    field: str | None = None


class PostResponse(BaseModel):
    id: str
    title: str
    content: str
    excerpt: str
    type: str
    category: str
    status: str
    published_at: str | None = None
    scheduled_for: str | None = None
    author_email: str | None = None
    author_name: str | None = None
    cover_image_url: str | None = None
    attachment_url: str | None = None
    attachment_name: str | None = None
    created_at: str
    updated_at: str


class PostListResponse(BaseModel):
    posts: list[PostResponse]
    count: int = Field(..., description="Number of posts returned")


def post_to_response(post: Post) -> PostResponse:
    return PostResponse(
        id=str(post.id),
        title=post.title,
        content=post.content,
        excerpt=post.excerpt,
        type=post.type,
        category=post.category,
        status=post.status,
        published_at=post.published_at.isoformat() if post.published_at else None,
        scheduled_for=post.scheduled_for.isoformat() if post.scheduled_for else None,
        author_email=post.author_email,
        author_name=post.author_name,
        cover_image_url=post.cover_image_url,
        attachment_url=post.attachment_url,
        attachment_name=post.attachment_name,
        created_at=post.created_at.isoformat(),
        updated_at=post.updated_at.isoformat(),
    )


NOT_FOUND_CODES = {"POST_NOT_FOUND", "SUBSCRIBER_NOT_FOUND", "ADMIN_NOT_FOUND"}
CONFLICT_CODES = {"ADMIN_EXISTS"}


def raise_for_errors(errors: Sequence[_ComponentError]) -> None:
    """Map component errors to an HTTP error: 403, 404, 409, 500 on store errors, else 400."""
    if not errors:
        return
    codes = {e.code for e in errors}
    if "ACCESS_DENIED" in codes:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=errors[0].message)
    if codes & NOT_FOUND_CODES:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=errors[0].message)
    if codes & CONFLICT_CODES:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=errors[0].message)
    if "STORE_ERROR" in codes:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal error, please try again",
        )
    detail = [
        FieldError(code=e.code, message=e.message, field=e.field).model_dump() for e in errors
    ]
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
