"""Posts component - owns the draft/scheduled/published lifecycle of a post."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import cast, get_args
from uuid import uuid4

from church_site.components.posts.models import (
    CreatePostInput,
    CreatePostOutput,
    DeletePostInput,
    DeletePostOutput,
    GetPostInput,
    GetPostOutput,
    ListAllInput,
    ListFeedInput,
    PostListOutput,
    PostValidationError,
    PromoteDueInput,
    PromoteDueOutput,
    SearchPostsInput,
    UpdatePostInput,
    UpdatePostOutput,
)
from church_site.components.posts.ports import ClockPort, PostRepoPort
from church_site.core.ports.db import StoreError
from church_site.domain.entities import (
    Post,
    PostCategory,
    PostStatus,
    PostType,
    Published,
)
from church_site.domain.excerpt import EXCERPT_MAX_LENGTH, make_excerpt
from church_site.domain.state import is_due, next_state

logger = logging.getLogger(__name__)

PostInput = (
    CreatePostInput
    | UpdatePostInput
    | DeletePostInput
    | PromoteDueInput
    | GetPostInput
    | ListFeedInput
    | ListAllInput
    | SearchPostsInput
)
PostOutput = (
    CreatePostOutput
    | UpdatePostOutput
    | DeletePostOutput
    | PromoteDueOutput
    | GetPostOutput
    | PostListOutput
)

STORE_ERROR = PostValidationError(
    code="STORE_ERROR",
    message="The post store is unavailable, please try again",
)


@dataclass(frozen=True)
class PostConfig:
    excerpt_max_length: int = EXCERPT_MAX_LENGTH
    types: tuple[str, ...] = get_args(PostType)
    categories: tuple[str, ...] = get_args(PostCategory)
    statuses: tuple[str, ...] = get_args(PostStatus)
    feed_max_limit: int = 100


def _as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes from forms are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class PostLifecycleManager:
    """Validates post saves, derives excerpt and timestamps, and persists."""

    def __init__(
        self,
        repo: PostRepoPort,
        clock: ClockPort,
        config: PostConfig | None = None,
    ) -> None:
        self._repo = repo
        self._clock = clock
        self._config = config or PostConfig()

    def run(self, input_data: PostInput) -> PostOutput:
        """Main dispatcher - routes to appropriate handler based on input type."""
        if isinstance(input_data, CreatePostInput):
            return self.create(input_data)
        elif isinstance(input_data, UpdatePostInput):
            return self.update(input_data)
        elif isinstance(input_data, DeletePostInput):
            return self.delete(input_data)
        elif isinstance(input_data, PromoteDueInput):
            return self.promote_due(input_data)
        elif isinstance(input_data, GetPostInput):
            return self.get(input_data)
        elif isinstance(input_data, ListFeedInput):
            return self.list_feed(input_data)
        elif isinstance(input_data, ListAllInput):
            return self.list_all(input_data)
        elif isinstance(input_data, SearchPostsInput):
            return self.search(input_data)
        else:
            raise TypeError(f"Unknown input type: {type(input_data)}")

    # --- Validation ---

    def _validate(
        self, input_data: CreatePostInput | UpdatePostInput, now: datetime
    ) -> list[PostValidationError]:
        errors: list[PostValidationError] = []

        if not input_data.title or not input_data.title.strip():
            errors.append(
                PostValidationError(
                    code="MISSING_REQUIRED_FIELD",
                    message="Title is required",
                    field="title",
                )
            )
        if not input_data.content or not input_data.content.strip():
            errors.append(
                PostValidationError(
                    code="MISSING_REQUIRED_FIELD",
                    message="Content is required",
                    field="content",
                )
            )
        if input_data.type not in self._config.types:
            errors.append(
                PostValidationError(
                    code="INVALID_TYPE",
                    message=f"Post type must be one of: {', '.join(self._config.types)}",
                    field="type",
                )
            )
        if input_data.category not in self._config.categories:
            errors.append(
                PostValidationError(
                    code="INVALID_CATEGORY",
                    message=(
                        f"Category must be one of: {', '.join(self._config.categories)}"
                    ),
                    field="category",
                )
            )
        if input_data.status not in self._config.statuses:
            errors.append(
                PostValidationError(
                    code="INVALID_STATUS",
                    message=f"Status must be one of: {', '.join(self._config.statuses)}",
                    field="status",
                )
            )
        elif input_data.status == "scheduled":
            scheduled_for = _as_utc(input_data.scheduled_for)
            if scheduled_for is None:
                errors.append(
                    PostValidationError(
                        code="SCHEDULE_TIME_REQUIRED",
                        message="A scheduled post needs a schedule time",
                        field="scheduled_for",
                    )
                )
            elif scheduled_for < now:
                errors.append(
                    PostValidationError(
                        code="SCHEDULE_IN_PAST",
                        message="Cannot schedule in the past",
                        field="scheduled_for",
                    )
                )

        return errors

    # --- Lifecycle ---

    def create(self, input_data: CreatePostInput) -> CreatePostOutput:
        """Create a post directly in draft, scheduled or published state."""
        now = self._clock.now_utc()
        errors = self._validate(input_data, now)
        if errors:
            return CreatePostOutput(errors=errors, success=False)

        post = Post(
            id=uuid4(),
            title=input_data.title.strip(),
            content=input_data.content,
            type=cast(PostType, input_data.type),
            category=cast(PostCategory, input_data.category),
            state=next_state(
                None,
                cast(PostStatus, input_data.status),
                now,
                _as_utc(input_data.scheduled_for),
            ),
            author_email=input_data.author_email,
            author_name=input_data.author_name,
            cover_image_url=input_data.cover_image_url,
            attachment_url=input_data.attachment_url,
            attachment_name=input_data.attachment_name,
            excerpt=make_excerpt(input_data.content, self._config.excerpt_max_length),
            created_at=now,
            updated_at=now,
        )

        try:
            saved = self._repo.save(post)
        except StoreError:
            logger.exception("Failed to create post %r", post.title)
            return CreatePostOutput(errors=[STORE_ERROR], success=False)

        logger.info("Created %s post %s (%s)", saved.status, saved.id, saved.type)
        return CreatePostOutput(post_id=saved.id, post=saved, success=True)

    def update(self, input_data: UpdatePostInput) -> UpdatePostOutput:
        """
        Replace the editable fields of a post and move it to the requested status.

        The first publication time survives re-saves that stay published;
        saving back to draft clears both publication and schedule times.
        """
        now = self._clock.now_utc()
        errors = self._validate(input_data, now)
        if errors:
            return UpdatePostOutput(errors=errors, success=False)

        try:
            existing = self._repo.get_by_id(input_data.post_id)
        except StoreError:
            logger.exception("Failed to load post %s", input_data.post_id)
            return UpdatePostOutput(errors=[STORE_ERROR], success=False)

        if existing is None:
            return UpdatePostOutput(
                errors=[
                    PostValidationError(
                        code="POST_NOT_FOUND",
                        message="Post not found",
                        field="post_id",
                    )
                ],
                success=False,
            )

        state = next_state(
            existing.state,
            cast(PostStatus, input_data.status),
            now,
            _as_utc(input_data.scheduled_for),
        )
        post = existing.model_copy(
            update={
                "title": input_data.title.strip(),
                "content": input_data.content,
                "type": input_data.type,
                "category": input_data.category,
                "state": state,
                "author_email": input_data.author_email,
                "author_name": input_data.author_name,
                "cover_image_url": input_data.cover_image_url,
                "attachment_url": input_data.attachment_url,
                "attachment_name": input_data.attachment_name,
                "excerpt": make_excerpt(
                    input_data.content, self._config.excerpt_max_length
                ),
                "updated_at": now,
            }
        )

        try:
            saved = self._repo.save(post)
        except StoreError:
            logger.exception("Failed to update post %s", post.id)
            return UpdatePostOutput(errors=[STORE_ERROR], success=False)

        first_published = isinstance(state, Published) and not isinstance(
            existing.state, Published
        )
        logger.info("Saved post %s as %s", saved.id, saved.status)
        return UpdatePostOutput(post=saved, first_published=first_published, success=True)

    def delete(self, input_data: DeletePostInput) -> DeletePostOutput:
        try:
            deleted = self._repo.delete(input_data.post_id)
        except StoreError:
            logger.exception("Failed to delete post %s", input_data.post_id)
            return DeletePostOutput(errors=[STORE_ERROR], success=False)

        if not deleted:
            return DeletePostOutput(
                errors=[
                    PostValidationError(
                        code="POST_NOT_FOUND",
                        message="Post not found",
                        field="post_id",
                    )
                ],
                success=False,
            )
        return DeletePostOutput(success=True)

    def promote_due(self, input_data: PromoteDueInput) -> PromoteDueOutput:
        """
        Publish every scheduled post whose time has come.

        Nothing calls this on its own: a cron entry (`church-site promote-due`)
        or an admin request must trigger it.
        """
        _ = input_data
        now = self._clock.now_utc()
        errors: list[PostValidationError] = []
        promoted = []

        try:
            candidates = self._repo.list_scheduled_due(now)
        except StoreError:
            logger.exception("Failed to list scheduled posts")
            return PromoteDueOutput(errors=[STORE_ERROR], success=False)

        for post in candidates:
            if not is_due(post.state, now):
                continue
            try:
                self._repo.save(
                    post.model_copy(
                        update={"state": Published(published_at=now), "updated_at": now}
                    )
                )
            except StoreError as e:
                logger.exception("Failed to promote post %s", post.id)
                errors.append(
                    PostValidationError(
                        code="STORE_ERROR",
                        message=f"Failed to publish post {post.id}: {e}",
                        field="post_id",
                    )
                )
                continue
            promoted.append(post.id)

        if promoted:
            logger.info("Promoted %d scheduled post(s)", len(promoted))
        return PromoteDueOutput(
            count=len(promoted),
            promoted_ids=promoted,
            errors=errors,
            success=not errors,
        )

    # --- Reads ---

    def get(self, input_data: GetPostInput) -> GetPostOutput:
        try:
            post = self._repo.get_by_id(input_data.post_id)
        except StoreError:
            logger.exception("Failed to load post %s", input_data.post_id)
            return GetPostOutput(errors=[STORE_ERROR], success=False)

        if post is None or (input_data.published_only and post.status != "published"):
            return GetPostOutput(
                errors=[
                    PostValidationError(
                        code="POST_NOT_FOUND",
                        message="Post not found",
                        field="post_id",
                    )
                ],
                success=False,
            )
        return GetPostOutput(post=post, success=True)

    def list_feed(self, input_data: ListFeedInput) -> PostListOutput:
        limit = max(1, min(input_data.limit, self._config.feed_max_limit))
        try:
            posts = self._repo.list_published(
                post_type=input_data.post_type,
                category=input_data.category,
                limit=limit,
            )
        except StoreError:
            logger.exception("Failed to list published posts")
            return PostListOutput(errors=[STORE_ERROR], success=False)
        return PostListOutput(posts=posts)

    def list_all(self, input_data: ListAllInput) -> PostListOutput:
        try:
            posts = self._repo.list_all(include_drafts=input_data.include_drafts)
        except StoreError:
            logger.exception("Failed to list posts")
            return PostListOutput(errors=[STORE_ERROR], success=False)
        return PostListOutput(posts=posts)

    def search(self, input_data: SearchPostsInput) -> PostListOutput:
        query = input_data.query.strip()
        if not query:
            return PostListOutput(posts=[])
        try:
            posts = self._repo.search_published(query, limit=input_data.limit)
        except StoreError:
            logger.exception("Failed to search posts for %r", query)
            return PostListOutput(errors=[STORE_ERROR], success=False)
        return PostListOutput(posts=posts)


def run(
    input_data: PostInput,
    *,
    repo: PostRepoPort,
    clock: ClockPort,
    config: PostConfig | None = None,
) -> PostOutput:
    """Component entry point."""
    return PostLifecycleManager(repo, clock, config).run(input_data)
