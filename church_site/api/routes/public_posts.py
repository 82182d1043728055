"""
Public post endpoints. Only published posts are visible here.

Endpoints:
- GET /api/public/posts - Feed, newest publication first
- GET /api/public/posts/search?q= - Title/content search
- GET /api/public/posts/{id} - One published post
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from church_site.api.deps import get_post_manager, get_rules
from church_site.api.schemas import (
    ErrorResponse,
    PostListResponse,
    PostResponse,
    post_to_response,
    raise_for_errors,
)
from church_site.components.posts import (
    GetPostInput,
    ListFeedInput,
    PostLifecycleManager,
    SearchPostsInput,
)
from church_site.rules.models import Rules

router = APIRouter()


@router.get("/posts", response_model=PostListResponse)
def list_published_posts(
    type: str | None = Query(None, description="announcement, event or general"),
    category: str | None = Query(None),
    limit: int | None = Query(None, ge=1),
    manager: PostLifecycleManager = Depends(get_post_manager),
    rules: Rules = Depends(get_rules),
) -> PostListResponse:
    result = manager.list_feed(
        ListFeedInput(
            post_type=type,
            category=category,
            limit=limit or rules.posts.feed_default_limit,
        )
    )
    raise_for_errors(result.errors)
    return PostListResponse(
        posts=[post_to_response(p) for p in result.posts], count=len(result.posts)
    )


@router.get("/posts/search", response_model=PostListResponse)
def search_posts(
    q: str = Query(..., min_length=1),
    limit: int = Query(20, ge=1, le=100),
    manager: PostLifecycleManager = Depends(get_post_manager),
) -> PostListResponse:
    result = manager.search(SearchPostsInput(query=q, limit=limit))
    raise_for_errors(result.errors)
    return PostListResponse(
        posts=[post_to_response(p) for p in result.posts], count=len(result.posts)
    )


@router.get(
    "/posts/{post_id}",
    response_model=PostResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_published_post(
    post_id: UUID,
    manager: PostLifecycleManager = Depends(get_post_manager),
) -> PostResponse:
    result = manager.get(GetPostInput(post_id=post_id, published_only=True))
    raise_for_errors(result.errors)
    assert result.post is not None
    return post_to_response(result.post)
