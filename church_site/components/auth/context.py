"""
Admin session context.

Holds the last identity resolved by the authorization gate so that
navigation chrome and request handlers can ask "is an admin signed in?"
without a round trip to the session store or admin table.

The gate is the only writer (`publish` / `clear`). Readers call
`current(now)` and may `subscribe` to be told when the slot changes.
An entry older than `ttl_seconds` reads as absent; callers that need a
definite answer go through `AuthorizationGate.current_admin()`, which
re-resolves on a miss.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from .models import AdminIdentity

logger = logging.getLogger(__name__)

Listener = Callable[[AdminIdentity | None], None]


class AdminSessionContext:
    def __init__(self, ttl_seconds: int = 60) -> None:
        self._ttl = timedelta(seconds=ttl_seconds)
        self._identity: AdminIdentity | None = None
        self._resolved_at: datetime | None = None
        self._listeners: list[Listener] = []

    def current(self, now: datetime) -> AdminIdentity | None:
        """Cached identity, or None if empty or older than the staleness window."""
        if self._identity is None or self._resolved_at is None:
            return None
        if now - self._resolved_at >= self._ttl:
            return None
        return self._identity

    @property
    def identity(self) -> AdminIdentity | None:
        """The slot contents regardless of age."""
        return self._identity

    @property
    def resolved_at(self) -> datetime | None:
        return self._resolved_at

    def publish(self, identity: AdminIdentity, now: datetime) -> None:
        self._identity = identity
        self._resolved_at = now
        self._notify()

    def clear(self) -> None:
        self._identity = None
        self._resolved_at = None
        self._notify()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._identity)
            except Exception:
                # Remaining listeners still run.
                logger.exception("Admin session listener failed")


class SessionContextRegistry:
    """
    One AdminSessionContext per session key (a token hash on the server).

    A context handed out by `get` is only kept once the gate publishes an
    identity to it, and is dropped again when it is cleared. Unknown,
    expired and denied tokens therefore leave nothing behind. Entries past
    the staleness window are evicted on the next `get`.
    """

    def __init__(self, ttl_seconds: int = 60) -> None:
        self.ttl_seconds = ttl_seconds
        self._contexts: dict[str, AdminSessionContext] = {}

    def get(self, key: str, now: datetime | None = None) -> AdminSessionContext:
        if now is not None:
            self.evict_stale(now)
        context = self._contexts.get(key)
        if context is None:
            context = AdminSessionContext(self.ttl_seconds)
            context.subscribe(self._tracker(key, context))
        return context

    def _tracker(self, key: str, context: AdminSessionContext) -> Listener:
        def track(identity: AdminIdentity | None) -> None:
            if identity is not None:
                self._contexts[key] = context
            elif self._contexts.get(key) is context:
                del self._contexts[key]

        return track

    def evict_stale(self, now: datetime) -> int:
        stale = [key for key, ctx in self._contexts.items() if ctx.current(now) is None]
        for key in stale:
            del self._contexts[key]
        return len(stale)

    def discard(self, key: str) -> None:
        context = self._contexts.pop(key, None)
        if context is not None:
            context.clear()

    def discard_email(self, email: str) -> int:
        """Drop every cached context holding this admin. Returns how many."""
        email = email.strip().lower()
        keys = [
            key
            for key, ctx in self._contexts.items()
            if ctx.identity is not None and ctx.identity.email.lower() == email
        ]
        for key in keys:
            self.discard(key)
        return len(keys)

    def clear(self) -> None:
        contexts = list(self._contexts.values())
        self._contexts.clear()
        for context in contexts:
            context.clear()

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, key: object) -> bool:
        return key in self._contexts
