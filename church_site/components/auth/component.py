import logging
from collections.abc import Collection

from church_site.core.ports.db import StoreError
from church_site.domain.entities import ADMIN_ROLES, AdminRecord

from .context import AdminSessionContext
from .models import (
    AdminIdentity,
    DeauthorizeInput,
    DeauthorizeOutput,
    ResolveInput,
    ResolveOutput,
    SessionInfo,
    SessionStoreError,
)
from .ports import AdminRepoPort, SessionStorePort, TimePort

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Administrator"


def _deny(
    session_store: SessionStorePort, context: AdminSessionContext, reason: str
) -> ResolveOutput:
    try:
        session_store.sign_out()
    except SessionStoreError:
        logger.exception("Sign-out after denied admin access failed")
    context.clear()
    return ResolveOutput(status="unauthorized", error=reason)


def _reconcile(
    record: AdminRecord, session: SessionInfo, admin_repo: AdminRepoPort, time: TimePort
) -> AdminRecord:
    """Point the admin row at the session's identity id and stamp last_login."""
    updates: dict[str, object] = {"last_login": time.now_utc()}
    if record.user_id != session.user_id:
        logger.info(
            "Re-keying admin %s from identity %s to %s",
            record.email,
            record.user_id,
            session.user_id,
        )
        updates["user_id"] = session.user_id

    updated = record.model_copy(update=updates)
    try:
        return admin_repo.save(updated)
    except StoreError:
        # Access stands even if the bookkeeping write fails.
        logger.exception("Failed to update admin record for %s", record.email)
        return updated


def run_resolve(
    inp: ResolveInput,
    *,
    session_store: SessionStorePort,
    admin_repo: AdminRepoPort,
    context: AdminSessionContext,
    time: TimePort,
    admin_roles: Collection[str] = ADMIN_ROLES,
) -> ResolveOutput:
    _ = inp

    try:
        session = session_store.get_current_session()
    except SessionStoreError as e:
        logger.warning("Session lookup failed: %s", e)
        session = None

    if session is None:
        context.clear()
        return ResolveOutput(status="unauthenticated")

    # Admin rows are provisioned by email before a login record exists.
    try:
        record = admin_repo.get_by_email(session.email.strip().lower())
    except StoreError:
        logger.exception("Admin lookup failed for %s", session.email)
        record = None

    if record is None:
        logger.warning("Denied admin access for %s: no admin record", session.email)
        return _deny(session_store, context, "Admin access required")

    if record.role not in admin_roles:
        logger.warning(
            "Denied admin access for %s: role %r is not an admin role",
            session.email,
            record.role,
        )
        return _deny(session_store, context, "Insufficient privileges")

    record = _reconcile(record, session, admin_repo, time)

    identity = AdminIdentity(
        id=session.user_id,
        email=record.email,
        display_name=record.name or session.display_name or DEFAULT_DISPLAY_NAME,
        role=record.role,
    )
    context.publish(identity, time.now_utc())
    return ResolveOutput(status="authorized", identity=identity)


def run_deauthorize(
    inp: DeauthorizeInput,
    *,
    session_store: SessionStorePort,
    context: AdminSessionContext,
) -> DeauthorizeOutput:
    _ = inp
    context.clear()
    try:
        session_store.sign_out()
    except SessionStoreError:
        logger.exception("Sign-out failed; local admin state already cleared")
    return DeauthorizeOutput()


def run(
    inp: ResolveInput | DeauthorizeInput,
    *,
    session_store: SessionStorePort,
    context: AdminSessionContext,
    admin_repo: AdminRepoPort | None = None,
    time: TimePort | None = None,
    admin_roles: Collection[str] = ADMIN_ROLES,
) -> ResolveOutput | DeauthorizeOutput:
    if isinstance(inp, ResolveInput):
        assert admin_repo and time
        return run_resolve(
            inp,
            session_store=session_store,
            admin_repo=admin_repo,
            context=context,
            time=time,
            admin_roles=admin_roles,
        )

    elif isinstance(inp, DeauthorizeInput):
        return run_deauthorize(inp, session_store=session_store, context=context)

    else:
        raise ValueError(f"Unknown input type: {type(inp)}")


class AuthorizationGate:
    """Binds the gate operations to one session store and context."""

    def __init__(
        self,
        session_store: SessionStorePort,
        admin_repo: AdminRepoPort,
        context: AdminSessionContext,
        time: TimePort,
        admin_roles: Collection[str] = ADMIN_ROLES,
    ) -> None:
        self.session_store = session_store
        self.admin_repo = admin_repo
        self.context = context
        self.time = time
        self.admin_roles = admin_roles
        self.last_result: ResolveOutput | None = None

    def resolve(self) -> ResolveOutput:
        self.last_result = run_resolve(
            ResolveInput(),
            session_store=self.session_store,
            admin_repo=self.admin_repo,
            context=self.context,
            time=self.time,
            admin_roles=self.admin_roles,
        )
        return self.last_result

    def deauthorize(self) -> DeauthorizeOutput:
        return run_deauthorize(
            DeauthorizeInput(), session_store=self.session_store, context=self.context
        )

    def current_admin(self) -> AdminIdentity | None:
        """Read-through: cached identity while fresh, otherwise resolve again."""
        cached = self.context.current(self.time.now_utc())
        if cached is not None:
            return cached
        return self.resolve().identity
