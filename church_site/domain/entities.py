from datetime import UTC, datetime
from typing import Annotated, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


# --- Enums / Literals ---
AdminRole = Literal["admin", "super_admin"]
PostType = Literal["announcement", "event", "general"]
PostStatus = Literal["draft", "scheduled", "published"]
PostCategory = Literal["general", "wednesday", "sunday", "bible"]

ADMIN_ROLES: frozenset[str] = frozenset({"admin", "super_admin"})


# --- Login identities & sessions ---


class User(BaseModel):
    """A login record held by the session store (not an admin grant)."""

    id: UUID = Field(default_factory=uuid4)
    email: str
    display_name: str
    password_hash: str
    status: Literal["active", "disabled"] = "active"
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Session(BaseModel):
    id: str
    user_id: UUID
    email: str
    token_hash: str
    expires_at: datetime
    created_at: datetime = Field(default_factory=_utcnow)


# --- Admin table ---


class AdminRecord(BaseModel):
    """
    Row of the admin table.

    Provisioned by email, so `user_id` may be missing or point at an older
    login record until the first successful resolve reconciles it.
    `role` is stored as free text; only ADMIN_ROLES grant access.
    """

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID | None = None
    email: str
    name: str | None = None
    role: str = "admin"
    created_at: datetime = Field(default_factory=_utcnow)
    last_login: datetime | None = None


# --- Post state (tagged union) ---


class Draft(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["draft"] = "draft"


class Scheduled(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["scheduled"] = "scheduled"
    scheduled_for: datetime


class Published(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: Literal["published"] = "published"
    published_at: datetime


PostState = Annotated[Draft | Scheduled | Published, Field(discriminator="status")]


# --- Posts ---


class Post(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    title: str
    content: str
    type: PostType
    category: PostCategory = "general"
    state: PostState = Field(default_factory=Draft)

    author_email: str | None = None
    author_name: str | None = None
    cover_image_url: str | None = None
    attachment_url: str | None = None
    attachment_name: str | None = None

    excerpt: str = ""

    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @property
    def status(self) -> PostStatus:
        return self.state.status

    @property
    def published_at(self) -> datetime | None:
        return self.state.published_at if isinstance(self.state, Published) else None

    @property
    def scheduled_for(self) -> datetime | None:
        return self.state.scheduled_for if isinstance(self.state, Scheduled) else None
