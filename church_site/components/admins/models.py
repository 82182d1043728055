"""
Admin management models.

Every operation carries the acting admin so the component can enforce
that only super admins manage the admin table.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from church_site.components.auth.models import AdminIdentity
from church_site.domain.entities import AdminRecord

# --- Input Models ---


@dataclass(frozen=True)
class ListAdminsInput:
    actor: AdminIdentity


@dataclass(frozen=True)
class AddAdminInput:
    actor: AdminIdentity
    email: str
    name: str
    role: str = "admin"


@dataclass(frozen=True)
class UpdateAdminRoleInput:
    actor: AdminIdentity
    admin_id: UUID
    role: str


@dataclass(frozen=True)
class RemoveAdminInput:
    actor: AdminIdentity
    admin_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class ValidationError:
    code: str
    message: str
    field: str | None = None


@dataclass(frozen=True)
class AdminListOutput:
    admins: list[AdminRecord] = field(default_factory=list)
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class AdminOutput:
    admin: AdminRecord | None = None
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RemoveAdminOutput:
    removed: AdminRecord | None = None
    revoked_sessions: int = 0
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True
