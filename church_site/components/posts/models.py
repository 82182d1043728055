"""Posts component models - frozen dataclass inputs and outputs."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from church_site.domain.entities import Post


@dataclass(frozen=True)
class PostValidationError:
    """Validation error details for post operations."""

    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class CreatePostInput:
    title: str
    content: str
    type: str
    status: str = "draft"
    category: str = "general"
    author_email: str | None = None
    author_name: str | None = None
    cover_image_url: str | None = None
    attachment_url: str | None = None
    attachment_name: str | None = None
    scheduled_for: datetime | None = None


@dataclass(frozen=True)
class CreatePostOutput:
    post_id: UUID | None = None
    post: Post | None = None
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = False


@dataclass(frozen=True)
class UpdatePostInput:
    """Full replacement of the editable fields of an existing post."""

    post_id: UUID
    title: str
    content: str
    type: str
    status: str = "draft"
    category: str = "general"
    author_email: str | None = None
    author_name: str | None = None
    cover_image_url: str | None = None
    attachment_url: str | None = None
    attachment_name: str | None = None
    scheduled_for: datetime | None = None


@dataclass(frozen=True)
class UpdatePostOutput:
    post: Post | None = None
    first_published: bool = False  # This save moved the post into published
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = False


@dataclass(frozen=True)
class DeletePostInput:
    post_id: UUID


@dataclass(frozen=True)
class DeletePostOutput:
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = False


@dataclass(frozen=True)
class PromoteDueInput:
    """Input for promoting due scheduled posts - empty input."""

    pass


@dataclass(frozen=True)
class PromoteDueOutput:
    count: int = 0
    promoted_ids: list[UUID] = field(default_factory=list)
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class GetPostInput:
    post_id: UUID
    published_only: bool = False


@dataclass(frozen=True)
class GetPostOutput:
    post: Post | None = None
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = False


@dataclass(frozen=True)
class ListFeedInput:
    """Published posts, newest publication first."""

    post_type: str | None = None
    category: str | None = None
    limit: int = 10


@dataclass(frozen=True)
class ListAllInput:
    include_drafts: bool = True


@dataclass(frozen=True)
class SearchPostsInput:
    query: str
    limit: int = 20


@dataclass(frozen=True)
class PostListOutput:
    posts: list[Post] = field(default_factory=list)
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = True
