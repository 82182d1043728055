"""
Admin management endpoints (super admins only).

Endpoints:
- GET /api/admin/admins - List admins
- POST /api/admin/admins - Grant admin access to an email
- PATCH /api/admin/admins/{id} - Change an admin's role
- DELETE /api/admin/admins/{id} - Remove an admin and revoke their sessions
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from church_site.adapters.auth.session_store import InMemorySessionStore
from church_site.adapters.sqlite.repos import SQLiteAdminRepo
from church_site.api.deps import (
    get_admin_repo,
    get_context_registry,
    get_session_store,
    require_super_admin,
)
from church_site.api.schemas import ErrorResponse, raise_for_errors
from church_site.components.admins import (
    AddAdminInput,
    ListAdminsInput,
    RemoveAdminInput,
    UpdateAdminRoleInput,
    run_add_admin,
    run_list_admins,
    run_remove_admin,
    run_update_admin_role,
)
from church_site.components.auth import AdminIdentity, SessionContextRegistry
from church_site.domain.entities import AdminRecord

router = APIRouter()


# --- Request/Response Models ---


class AdminCreateRequest(BaseModel):
    email: str
    name: str
    role: str = "admin"


class AdminRoleRequest(BaseModel):
    role: str


class AdminResponse(BaseModel):
    id: str
    email: str
    name: str | None = None
    role: str
    linked: bool
    created_at: str
    last_login: str | None = None


def _admin_to_response(record: AdminRecord) -> AdminResponse:
    return AdminResponse(
        id=str(record.id),
        email=record.email,
        name=record.name,
        role=record.role,
        linked=record.user_id is not None,
        created_at=record.created_at.isoformat(),
        last_login=record.last_login.isoformat() if record.last_login else None,
    )


# --- Endpoints ---


@router.get("", response_model=list[AdminResponse])
def list_admins(
    actor: AdminIdentity = Depends(require_super_admin),
    repo: SQLiteAdminRepo = Depends(get_admin_repo),
) -> list[AdminResponse]:
    result = run_list_admins(ListAdminsInput(actor=actor), repo)
    raise_for_errors(result.errors)
    return [_admin_to_response(a) for a in result.admins]


@router.post(
    "",
    response_model=AdminResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
def add_admin(
    body: AdminCreateRequest,
    actor: AdminIdentity = Depends(require_super_admin),
    repo: SQLiteAdminRepo = Depends(get_admin_repo),
) -> AdminResponse:
    """Grant access by email; the row links to a login on its first sign-in."""
    result = run_add_admin(
        AddAdminInput(actor=actor, email=body.email, name=body.name, role=body.role), repo
    )
    raise_for_errors(result.errors)
    assert result.admin is not None
    return _admin_to_response(result.admin)


@router.patch(
    "/{admin_id}",
    response_model=AdminResponse,
    responses={404: {"model": ErrorResponse}},
)
def update_admin_role(
    admin_id: UUID,
    body: AdminRoleRequest,
    actor: AdminIdentity = Depends(require_super_admin),
    repo: SQLiteAdminRepo = Depends(get_admin_repo),
    registry: SessionContextRegistry = Depends(get_context_registry),
) -> AdminResponse:
    result = run_update_admin_role(
        UpdateAdminRoleInput(actor=actor, admin_id=admin_id, role=body.role), repo
    )
    raise_for_errors(result.errors)
    assert result.admin is not None
    registry.discard_email(result.admin.email)
    return _admin_to_response(result.admin)


@router.delete(
    "/{admin_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
def remove_admin(
    admin_id: UUID,
    actor: AdminIdentity = Depends(require_super_admin),
    repo: SQLiteAdminRepo = Depends(get_admin_repo),
    sessions: InMemorySessionStore = Depends(get_session_store),
    registry: SessionContextRegistry = Depends(get_context_registry),
) -> None:
    result = run_remove_admin(RemoveAdminInput(actor=actor, admin_id=admin_id), repo, sessions)
    raise_for_errors(result.errors)
    assert result.removed is not None
    registry.discard_email(result.removed.email)
