"""
Admin management ports.

Repository methods may raise StoreError.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from church_site.domain.entities import AdminRecord


class AdminDirectoryPort(Protocol):
    def get_by_id(self, admin_id: UUID) -> AdminRecord | None: ...

    def get_by_email(self, email: str) -> AdminRecord | None:
        """Case-insensitive lookup."""
        ...

    def save(self, record: AdminRecord) -> AdminRecord: ...

    def list_all(self) -> list[AdminRecord]:
        """All admin rows, oldest first."""
        ...

    def delete(self, admin_id: UUID) -> bool:
        """Returns False if the row did not exist."""
        ...


class SessionRevokerPort(Protocol):
    def delete_by_user(self, user_id: UUID) -> int:
        """Revoke every session of a login. Returns how many were removed."""
        ...
