"""
Admin management component.

Key behaviors:
- Only super admins list, add, re-role or remove admins
- Roles are limited to the AdminRole values
- An admin cannot change their own role or remove themselves
- Removing an admin revokes the sessions of its linked login
"""

from __future__ import annotations

import logging
from typing import get_args

from church_site.components.admins.models import (
    AddAdminInput,
    AdminListOutput,
    AdminOutput,
    ListAdminsInput,
    RemoveAdminInput,
    RemoveAdminOutput,
    UpdateAdminRoleInput,
    ValidationError,
)
from church_site.components.admins.ports import AdminDirectoryPort, SessionRevokerPort
from church_site.components.auth.models import AdminIdentity
from church_site.components.subscribers import EMAIL_REGEX, normalize_email
from church_site.core.ports.db import StoreError
from church_site.domain.entities import AdminRecord, AdminRole

logger = logging.getLogger(__name__)

MANAGER_ROLE = "super_admin"
ASSIGNABLE_ROLES: tuple[str, ...] = get_args(AdminRole)

ACCESS_DENIED = ValidationError("ACCESS_DENIED", "Super admin access required", None)
STORE_ERROR = ValidationError("STORE_ERROR", "Admin store is unavailable", None)
NOT_FOUND = ValidationError("ADMIN_NOT_FOUND", "Admin not found", None)


def can_manage_admins(actor: AdminIdentity) -> bool:
    return actor.role == MANAGER_ROLE


def _is_self(actor: AdminIdentity, record: AdminRecord) -> bool:
    return record.user_id == actor.id or record.email.lower() == actor.email.lower()


def _validate_role(role: str) -> list[ValidationError]:
    if role not in ASSIGNABLE_ROLES:
        return [
            ValidationError(
                "INVALID_ROLE", f"Role must be one of: {', '.join(ASSIGNABLE_ROLES)}", "role"
            )
        ]
    return []


# --- Run Handlers ---


def run_list_admins(inp: ListAdminsInput, repo: AdminDirectoryPort) -> AdminListOutput:
    if not can_manage_admins(inp.actor):
        return AdminListOutput(errors=[ACCESS_DENIED], success=False)

    try:
        admins = repo.list_all()
    except StoreError:
        logger.exception("Failed to list admins")
        return AdminListOutput(errors=[STORE_ERROR], success=False)
    return AdminListOutput(admins=admins)


def run_add_admin(inp: AddAdminInput, repo: AdminDirectoryPort) -> AdminOutput:
    if not can_manage_admins(inp.actor):
        return AdminOutput(errors=[ACCESS_DENIED], success=False)

    email = normalize_email(inp.email)
    name = inp.name.strip() if inp.name else ""
    errors: list[ValidationError] = []
    if not email:
        errors.append(ValidationError("MISSING_REQUIRED_FIELD", "Email is required", "email"))
    elif not EMAIL_REGEX.match(email):
        errors.append(ValidationError("INVALID_FORMAT", "Invalid email format", "email"))
    if not name:
        errors.append(ValidationError("MISSING_REQUIRED_FIELD", "Name is required", "name"))
    errors.extend(_validate_role(inp.role))
    if errors:
        return AdminOutput(errors=errors, success=False)

    try:
        if repo.get_by_email(email) is not None:
            return AdminOutput(
                errors=[ValidationError("ADMIN_EXISTS", "This email is already an admin", "email")],
                success=False,
            )
        record = repo.save(AdminRecord(email=email, name=name, role=inp.role))
    except StoreError:
        logger.exception("Failed to add admin %s", email)
        return AdminOutput(errors=[STORE_ERROR], success=False)

    logger.info("%s granted %s to %s", inp.actor.email, record.role, record.email)
    return AdminOutput(admin=record)


def run_update_admin_role(inp: UpdateAdminRoleInput, repo: AdminDirectoryPort) -> AdminOutput:
    if not can_manage_admins(inp.actor):
        return AdminOutput(errors=[ACCESS_DENIED], success=False)

    errors = _validate_role(inp.role)
    if errors:
        return AdminOutput(errors=errors, success=False)

    try:
        record = repo.get_by_id(inp.admin_id)
        if record is None:
            return AdminOutput(errors=[NOT_FOUND], success=False)
        if _is_self(inp.actor, record):
            return AdminOutput(
                errors=[
                    ValidationError(
                        "SELF_CHANGE_FORBIDDEN", "You cannot change your own role", "role"
                    )
                ],
                success=False,
            )
        updated = repo.save(record.model_copy(update={"role": inp.role}))
    except StoreError:
        logger.exception("Failed to update admin %s", inp.admin_id)
        return AdminOutput(errors=[STORE_ERROR], success=False)

    logger.info("%s changed %s to %s", inp.actor.email, updated.email, updated.role)
    return AdminOutput(admin=updated)


def run_remove_admin(
    inp: RemoveAdminInput,
    repo: AdminDirectoryPort,
    sessions: SessionRevokerPort,
) -> RemoveAdminOutput:
    if not can_manage_admins(inp.actor):
        return RemoveAdminOutput(errors=[ACCESS_DENIED], success=False)

    try:
        record = repo.get_by_id(inp.admin_id)
        if record is None:
            return RemoveAdminOutput(errors=[NOT_FOUND], success=False)
        if _is_self(inp.actor, record):
            return RemoveAdminOutput(
                errors=[ValidationError("SELF_CHANGE_FORBIDDEN", "You cannot remove yourself")],
                success=False,
            )
        if not repo.delete(record.id):
            return RemoveAdminOutput(errors=[NOT_FOUND], success=False)
    except StoreError:
        logger.exception("Failed to remove admin %s", inp.admin_id)
        return RemoveAdminOutput(errors=[STORE_ERROR], success=False)

    revoked = sessions.delete_by_user(record.user_id) if record.user_id else 0
    logger.info(
        "%s removed admin %s (%d session(s) revoked)", inp.actor.email, record.email, revoked
    )
    return RemoveAdminOutput(removed=record, revoked_sessions=revoked)


def run(
    inp: ListAdminsInput | AddAdminInput | UpdateAdminRoleInput | RemoveAdminInput,
    *,
    repo: AdminDirectoryPort,
    sessions: SessionRevokerPort,
) -> AdminListOutput | AdminOutput | RemoveAdminOutput:
    """Main entry point for admin management."""
    if isinstance(inp, ListAdminsInput):
        return run_list_admins(inp, repo)
    elif isinstance(inp, AddAdminInput):
        return run_add_admin(inp, repo)
    elif isinstance(inp, UpdateAdminRoleInput):
        return run_update_admin_role(inp, repo)
    elif isinstance(inp, RemoveAdminInput):
        return run_remove_admin(inp, repo, sessions)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
