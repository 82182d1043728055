from dataclasses import dataclass
from typing import Literal
from uuid import UUID

GateStatus = Literal["unauthenticated", "unauthorized", "authorized"]


@dataclass(frozen=True)
class SessionInfo:
    """What the session store knows about the current bearer."""

    user_id: UUID
    email: str
    display_name: str | None = None


@dataclass(frozen=True)
class AdminIdentity:
    """A session resolved to an admin grant. Only built for admin roles."""

    id: UUID
    email: str
    display_name: str
    role: str


@dataclass(frozen=True)
class ResolveInput:
    pass


@dataclass(frozen=True)
class DeauthorizeInput:
    pass


@dataclass(frozen=True)
class ResolveOutput:
    status: GateStatus
    identity: AdminIdentity | None = None
    error: str | None = None

    @property
    def authorized(self) -> bool:
        return self.status == "authorized" and self.identity is not None


@dataclass(frozen=True)
class DeauthorizeOutput:
    status: GateStatus = "unauthenticated"
    success: bool = True


class SessionStoreError(Exception):
    """The session store could not be reached or returned garbage."""
