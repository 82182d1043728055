import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from church_site.adapters.auth.crypto import JWTAuthAdapter
from church_site.adapters.auth.session_store import InMemorySessionStore, TokenSessionStore
from church_site.adapters.clock import SystemClock
from church_site.adapters.dev_email import DevEmailAdapter
from church_site.adapters.resend_email import ResendEmailAdapter
from church_site.adapters.sqlite.repos import (
    SQLiteAdminRepo,
    SQLitePostRepo,
    SQLiteReceiptRepo,
    SQLiteSubscriberRepo,
    SQLiteUserRepo,
)
from church_site.components.auth import (
    AdminIdentity,
    AdminSessionContext,
    AuthorizationGate,
    SessionContextRegistry,
)
from church_site.components.notifications import NotificationConfig, NotificationDispatcher
from church_site.components.posts import PostConfig, PostLifecycleManager
from church_site.components.subscribers import SubscriberConfig
from church_site.core.ports.email import EmailAddress, EmailPort
from church_site.rules.loader import load_rules
from church_site.rules.models import Rules
from church_site.services.auth import AuthService

ACCESS_TOKEN_COOKIE = "access_token"


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("CHURCH_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "church.db")
        self.rules_path = Path(os.environ.get("CHURCH_RULES_PATH", self.base_dir / "rules.yaml"))
        self.resend_api_key = os.environ.get("RESEND_API_KEY", "")


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Repos ---
def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_admin_repo(settings: Settings = Depends(get_settings)) -> SQLiteAdminRepo:
    return SQLiteAdminRepo(settings.db_path)


def get_post_repo(settings: Settings = Depends(get_settings)) -> SQLitePostRepo:
    return SQLitePostRepo(settings.db_path)


def get_subscriber_repo(settings: Settings = Depends(get_settings)) -> SQLiteSubscriberRepo:
    return SQLiteSubscriberRepo(settings.db_path)


def get_receipt_repo(settings: Settings = Depends(get_settings)) -> SQLiteReceiptRepo:
    return SQLiteReceiptRepo(settings.db_path)


# --- Singletons ---
_clock_instance: SystemClock | None = None
_session_store_instance: InMemorySessionStore | None = None
_context_registry_instance: SessionContextRegistry | None = None
_email_adapter_instance: EmailPort | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


def get_session_store() -> InMemorySessionStore:
    """Registry of issued sessions, shared by login and the gate."""
    global _session_store_instance
    if _session_store_instance is None:
        _session_store_instance = InMemorySessionStore()
    return _session_store_instance


def get_context_registry(rules: Rules = Depends(get_rules)) -> SessionContextRegistry:
    """Per-session admin contexts, shared across requests."""
    global _context_registry_instance
    if _context_registry_instance is None:
        _context_registry_instance = SessionContextRegistry(
            ttl_seconds=rules.auth.identity_cache_ttl_seconds
        )
    return _context_registry_instance


def get_auth_adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter()


def get_email_adapter(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
) -> EmailPort:
    """Resend when RESEND_API_KEY is set, otherwise the logging dev adapter."""
    global _email_adapter_instance
    if _email_adapter_instance is None:
        if settings.resend_api_key:
            sender = rules.notifications.sender
            _email_adapter_instance = ResendEmailAdapter(
                settings.resend_api_key, EmailAddress(sender.address, sender.name)
            )
        else:
            _email_adapter_instance = DevEmailAdapter()
    return _email_adapter_instance


# --- Component configuration ---
def get_post_config(rules: Rules = Depends(get_rules)) -> PostConfig:
    return PostConfig(
        excerpt_max_length=rules.posts.excerpt_max_length,
        types=tuple(rules.posts.types),
        categories=tuple(rules.posts.categories),
        feed_max_limit=rules.posts.feed_max_limit,
    )


def get_subscriber_config(rules: Rules = Depends(get_rules)) -> SubscriberConfig:
    return SubscriberConfig(max_email_length=rules.subscribers.max_email_length)


def get_notification_config(rules: Rules = Depends(get_rules)) -> NotificationConfig:
    n = rules.notifications
    return NotificationConfig(
        subject_prefix=n.subject_prefix,
        site_name=n.site_name,
        site_url=n.site_url,
        sender=EmailAddress(n.sender.address, n.sender.name),
        reply_to=EmailAddress(n.sender.reply_to) if n.sender.reply_to else None,
        type_labels=dict(n.type_labels),
    )


# --- Component Services ---
def get_post_manager(
    repo: SQLitePostRepo = Depends(get_post_repo),
    clock: SystemClock = Depends(get_clock),
    config: PostConfig = Depends(get_post_config),
) -> PostLifecycleManager:
    return PostLifecycleManager(repo, clock, config)


def get_dispatcher(
    subscribers: SQLiteSubscriberRepo = Depends(get_subscriber_repo),
    receipts: SQLiteReceiptRepo = Depends(get_receipt_repo),
    email: EmailPort = Depends(get_email_adapter),
    clock: SystemClock = Depends(get_clock),
    config: NotificationConfig = Depends(get_notification_config),
) -> NotificationDispatcher:
    return NotificationDispatcher(subscribers, receipts, email, clock, config)


def get_auth_service(
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    crypto: JWTAuthAdapter = Depends(get_auth_adapter),
    sessions: InMemorySessionStore = Depends(get_session_store),
    clock: SystemClock = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> AuthService:
    return AuthService(user_repo, crypto, sessions, clock, rules.auth.sessions.ttl_minutes)


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_bearer_token(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> str | None:
    """HttpOnly cookie first, then the Authorization header."""
    cookie_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token.split(" ", 1)[1]
    return token


def get_gate(
    token: Annotated[str | None, Depends(get_bearer_token)],
    sessions: InMemorySessionStore = Depends(get_session_store),
    registry: SessionContextRegistry = Depends(get_context_registry),
    crypto: JWTAuthAdapter = Depends(get_auth_adapter),
    clock: SystemClock = Depends(get_clock),
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    admin_repo: SQLiteAdminRepo = Depends(get_admin_repo),
    rules: Rules = Depends(get_rules),
) -> AuthorizationGate:
    session_store = TokenSessionStore(token, sessions, crypto, clock, users=user_repo)
    if token:
        context = registry.get(crypto.hash_token(token), clock.now_utc())
    else:
        context = AdminSessionContext(registry.ttl_seconds)
    return AuthorizationGate(
        session_store=session_store,
        admin_repo=admin_repo,
        context=context,
        time=clock,
        admin_roles=frozenset(rules.auth.admin_roles),
    )


def require_admin(gate: AuthorizationGate = Depends(get_gate)) -> AdminIdentity:
    """Admin identity for this request; 401 without a session, 403 without a grant."""
    identity = gate.current_admin()
    if identity is not None:
        return identity

    result = gate.last_result
    if result is None or result.status == "unauthenticated":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=result.error or "Admin access required",
    )


def require_super_admin(admin: AdminIdentity = Depends(require_admin)) -> AdminIdentity:
    """Admin identity holding the super_admin role; 403 for plain admins."""
    if admin.role != "super_admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Super admin access required",
        )
    return admin


def close_adapters() -> None:
    """Release adapter resources (the Resend HTTP client) at shutdown."""
    global _email_adapter_instance
    if isinstance(_email_adapter_instance, ResendEmailAdapter):
        _email_adapter_instance.close()
    _email_adapter_instance = None


def reset_singletons() -> None:
    """Drop cached adapters and settings - for tests."""
    global _clock_instance, _session_store_instance
    global _context_registry_instance, _email_adapter_instance
    _clock_instance = None
    _session_store_instance = None
    _context_registry_instance = None
    _email_adapter_instance = None
    get_settings.cache_clear()
    get_rules.cache_clear()
