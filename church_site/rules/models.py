from pydantic import BaseModel, Field, field_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str


class PostRules(BaseModel):
    excerpt_max_length: int = Field(140, ge=1)
    types: list[str]
    categories: list[str]
    feed_default_limit: int = Field(10, ge=1)
    feed_max_limit: int = Field(100, ge=1)


class SessionRules(BaseModel):
    ttl_minutes: int = Field(ge=1)


class AuthRules(BaseModel):
    admin_roles: list[str]
    sessions: SessionRules
    identity_cache_ttl_seconds: int = Field(60, ge=0)

    @field_validator("admin_roles")
    @classmethod
    def roles_not_empty(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("At least one admin role is required")
        return v


class SubscriberRules(BaseModel):
    max_email_length: int = Field(254, ge=3)


class SenderRules(BaseModel):
    name: str
    address: str
    reply_to: str | None = None


class NotificationRules(BaseModel):
    subject_prefix: str = "[church-news]"
    site_name: str
    site_url: str = "http://localhost:8000"
    sender: SenderRules
    type_labels: dict[str, str] = Field(default_factory=dict)


class Rules(BaseModel):
    project: ProjectRules
    posts: PostRules
    auth: AuthRules
    subscribers: SubscriberRules
    notifications: NotificationRules
