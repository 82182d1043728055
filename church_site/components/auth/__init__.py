"""
Auth component - admin authorization gate.

Resolves the current session to an admin identity, fails closed on
anything else, and mirrors the result into an injectable session context.
"""

from .component import (
    AuthorizationGate,
    run,
    run_deauthorize,
    run_resolve,
)
from .context import AdminSessionContext, SessionContextRegistry
from .models import (
    AdminIdentity,
    DeauthorizeInput,
    DeauthorizeOutput,
    GateStatus,
    ResolveInput,
    ResolveOutput,
    SessionInfo,
    SessionStoreError,
)
from .ports import AdminRepoPort, SessionStorePort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_resolve",
    "run_deauthorize",
    "AuthorizationGate",
    # Context
    "AdminSessionContext",
    "SessionContextRegistry",
    # Models
    "AdminIdentity",
    "DeauthorizeInput",
    "DeauthorizeOutput",
    "GateStatus",
    "ResolveInput",
    "ResolveOutput",
    "SessionInfo",
    "SessionStoreError",
    # Ports
    "AdminRepoPort",
    "SessionStorePort",
    "TimePort",
]
