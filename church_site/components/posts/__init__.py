"""Posts component - manages the post publishing lifecycle."""

from church_site.components.posts.component import PostConfig, PostLifecycleManager, run
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

__all__ = [
    # Entry point
    "run",
    # Component
    "PostLifecycleManager",
    "PostConfig",
    # Models
    "CreatePostInput",
    "CreatePostOutput",
    "UpdatePostInput",
    "UpdatePostOutput",
    "DeletePostInput",
    "DeletePostOutput",
    "PromoteDueInput",
    "PromoteDueOutput",
    "GetPostInput",
    "GetPostOutput",
    "ListFeedInput",
    "ListAllInput",
    "SearchPostsInput",
    "PostListOutput",
    "PostValidationError",
    # Ports
    "PostRepoPort",
    "ClockPort",
]
