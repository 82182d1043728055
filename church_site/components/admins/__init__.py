"""Admin management component - the admin table as seen by super admins."""

from church_site.components.admins.component import (
    ASSIGNABLE_ROLES,
    can_manage_admins,
    run,
    run_add_admin,
    run_list_admins,
    run_remove_admin,
    run_update_admin_role,
)
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

__all__ = [
    # Entry points
    "run",
    "run_list_admins",
    "run_add_admin",
    "run_update_admin_role",
    "run_remove_admin",
    # Policy
    "can_manage_admins",
    "ASSIGNABLE_ROLES",
    # Models
    "ListAdminsInput",
    "AddAdminInput",
    "UpdateAdminRoleInput",
    "RemoveAdminInput",
    "AdminListOutput",
    "AdminOutput",
    "RemoveAdminOutput",
    "ValidationError",
    # Ports
    "AdminDirectoryPort",
    "SessionRevokerPort",
]
