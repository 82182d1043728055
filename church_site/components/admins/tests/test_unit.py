"""
Admin management unit tests.
"""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest

from church_site.components.admins import (
    ASSIGNABLE_ROLES,
    AddAdminInput,
    ListAdminsInput,
    RemoveAdminInput,
    UpdateAdminRoleInput,
    can_manage_admins,
    run,
    run_add_admin,
    run_list_admins,
    run_remove_admin,
    run_update_admin_role,
)
from church_site.components.auth import AdminIdentity
from church_site.core.ports.db import StoreError
from church_site.domain.entities import AdminRecord

# --- Mock Implementations ---


class MockAdminDirectory:
    def __init__(self, *records: AdminRecord) -> None:
        self.records = {r.id: r for r in records}
        self.fail = False

    def _check(self) -> None:
        if self.fail:
            raise StoreError("admin_users")

    def get_by_id(self, admin_id: UUID) -> AdminRecord | None:
        self._check()
        return self.records.get(admin_id)

    def get_by_email(self, email: str) -> AdminRecord | None:
        self._check()
        for r in self.records.values():
            if r.email.lower() == email.lower():
                return r
        return None

    def save(self, record: AdminRecord) -> AdminRecord:
        self._check()
        self.records[record.id] = record
        return record

    def list_all(self) -> list[AdminRecord]:
        self._check()
        return sorted(self.records.values(), key=lambda r: r.created_at)

    def delete(self, admin_id: UUID) -> bool:
        self._check()
        return self.records.pop(admin_id, None) is not None


class MockSessionRevoker:
    def __init__(self) -> None:
        self.revoked: list[UUID] = []

    def delete_by_user(self, user_id: UUID) -> int:
        self.revoked.append(user_id)
        return 2


# --- Fixtures ---

OWNER_ID = uuid4()


@pytest.fixture
def owner_record() -> AdminRecord:
    return AdminRecord(user_id=OWNER_ID, email="owner@church.org", name="Owner", role="super_admin")


@pytest.fixture
def owner() -> AdminIdentity:
    return AdminIdentity(OWNER_ID, "owner@church.org", "Owner", "super_admin")


@pytest.fixture
def clerk() -> AdminIdentity:
    return AdminIdentity(uuid4(), "clerk@church.org", "Clerk", "admin")


@pytest.fixture
def deacon() -> AdminRecord:
    return AdminRecord(user_id=uuid4(), email="deacon@church.org", name="Deacon", role="admin")


@pytest.fixture
def repo(owner_record: AdminRecord, deacon: AdminRecord) -> MockAdminDirectory:
    return MockAdminDirectory(owner_record, deacon)


@pytest.fixture
def sessions() -> MockSessionRevoker:
    return MockSessionRevoker()


# --- Policy ---


class TestPolicy:
    def test_only_super_admin_manages(self, owner: AdminIdentity, clerk: AdminIdentity) -> None:
        assert can_manage_admins(owner)
        assert not can_manage_admins(clerk)

    def test_assignable_roles(self) -> None:
        assert set(ASSIGNABLE_ROLES) == {"admin", "super_admin"}

    def test_plain_admin_denied_everywhere(
        self,
        clerk: AdminIdentity,
        repo: MockAdminDirectory,
        deacon: AdminRecord,
        sessions: MockSessionRevoker,
    ) -> None:
        outputs = [
            run_list_admins(ListAdminsInput(actor=clerk), repo),
            run_add_admin(AddAdminInput(actor=clerk, email="x@church.org", name="X"), repo),
            run_update_admin_role(
                UpdateAdminRoleInput(actor=clerk, admin_id=deacon.id, role="super_admin"), repo
            ),
            run_remove_admin(RemoveAdminInput(actor=clerk, admin_id=deacon.id), repo, sessions),
        ]

        assert all(o.errors[0].code == "ACCESS_DENIED" for o in outputs)
        assert deacon.id in repo.records
        assert sessions.revoked == []


# --- List / Add ---


class TestListAdmins:
    def test_lists_oldest_first(self, owner: AdminIdentity, repo: MockAdminDirectory) -> None:
        result = run_list_admins(ListAdminsInput(actor=owner), repo)

        assert result.success
        assert [a.email for a in result.admins] == ["owner@church.org", "deacon@church.org"]

    def test_store_error(self, owner: AdminIdentity, repo: MockAdminDirectory) -> None:
        repo.fail = True

        assert run_list_admins(ListAdminsInput(actor=owner), repo).errors[0].code == "STORE_ERROR"


class TestAddAdmin:
    def test_adds_unlinked_row(self, owner: AdminIdentity, repo: MockAdminDirectory) -> None:
        """The row is keyed by email; the login is linked on first sign-in."""
        result = run_add_admin(
            AddAdminInput(actor=owner, email=" Elder@Church.ORG ", name=" Elder ", role="admin"),
            repo,
        )

        assert result.success
        assert result.admin is not None
        assert (result.admin.email, result.admin.name) == ("elder@church.org", "Elder")
        assert result.admin.user_id is None
        assert result.admin.id in repo.records

    def test_requires_email_and_name(
        self, owner: AdminIdentity, repo: MockAdminDirectory
    ) -> None:
        result = run_add_admin(AddAdminInput(actor=owner, email=" ", name=""), repo)

        assert not result.success
        assert {e.field for e in result.errors} == {"email", "name"}

    def test_rejects_bad_email_and_role(
        self, owner: AdminIdentity, repo: MockAdminDirectory
    ) -> None:
        result = run_add_admin(
            AddAdminInput(actor=owner, email="not-an-email", name="N", role="editor"), repo
        )

        assert [e.code for e in result.errors] == ["INVALID_FORMAT", "INVALID_ROLE"]

    def test_existing_email_conflicts(
        self, owner: AdminIdentity, repo: MockAdminDirectory
    ) -> None:
        result = run_add_admin(
            AddAdminInput(actor=owner, email="DEACON@church.org", name="Again"), repo
        )

        assert result.errors[0].code == "ADMIN_EXISTS"
        assert len(repo.records) == 2


# --- Update / Remove ---


class TestUpdateRole:
    def test_promotes(
        self, owner: AdminIdentity, repo: MockAdminDirectory, deacon: AdminRecord
    ) -> None:
        result = run_update_admin_role(
            UpdateAdminRoleInput(actor=owner, admin_id=deacon.id, role="super_admin"), repo
        )

        assert result.success
        assert repo.records[deacon.id].role == "super_admin"

    def test_cannot_change_own_role(
        self, owner: AdminIdentity, repo: MockAdminDirectory, owner_record: AdminRecord
    ) -> None:
        result = run_update_admin_role(
            UpdateAdminRoleInput(actor=owner, admin_id=owner_record.id, role="admin"), repo
        )

        assert result.errors[0].code == "SELF_CHANGE_FORBIDDEN"
        assert repo.records[owner_record.id].role == "super_admin"

    def test_unknown_role(
        self, owner: AdminIdentity, repo: MockAdminDirectory, deacon: AdminRecord
    ) -> None:
        result = run_update_admin_role(
            UpdateAdminRoleInput(actor=owner, admin_id=deacon.id, role="ADMIN"), repo
        )

        assert result.errors[0].code == "INVALID_ROLE"

    def test_missing_admin(self, owner: AdminIdentity, repo: MockAdminDirectory) -> None:
        result = run_update_admin_role(
            UpdateAdminRoleInput(actor=owner, admin_id=uuid4(), role="admin"), repo
        )

        assert result.errors[0].code == "ADMIN_NOT_FOUND"


class TestRemoveAdmin:
    def test_removes_and_revokes_sessions(
        self,
        owner: AdminIdentity,
        repo: MockAdminDirectory,
        deacon: AdminRecord,
        sessions: MockSessionRevoker,
    ) -> None:
        result = run_remove_admin(RemoveAdminInput(actor=owner, admin_id=deacon.id), repo, sessions)

        assert result.success
        assert result.removed == deacon
        assert result.revoked_sessions == 2
        assert sessions.revoked == [deacon.user_id]
        assert deacon.id not in repo.records

    def test_unlinked_row_revokes_nothing(
        self, owner: AdminIdentity, repo: MockAdminDirectory, sessions: MockSessionRevoker
    ) -> None:
        pending = repo.save(AdminRecord(email="new@church.org", name="New"))

        result = run_remove_admin(
            RemoveAdminInput(actor=owner, admin_id=pending.id), repo, sessions
        )

        assert result.success
        assert result.revoked_sessions == 0
        assert sessions.revoked == []

    def test_cannot_remove_self(
        self,
        owner: AdminIdentity,
        repo: MockAdminDirectory,
        owner_record: AdminRecord,
        sessions: MockSessionRevoker,
    ) -> None:
        result = run_remove_admin(
            RemoveAdminInput(actor=owner, admin_id=owner_record.id), repo, sessions
        )

        assert result.errors[0].code == "SELF_CHANGE_FORBIDDEN"
        assert owner_record.id in repo.records

    def test_store_error_keeps_sessions(
        self,
        owner: AdminIdentity,
        repo: MockAdminDirectory,
        deacon: AdminRecord,
        sessions: MockSessionRevoker,
    ) -> None:
        repo.fail = True

        result = run_remove_admin(RemoveAdminInput(actor=owner, admin_id=deacon.id), repo, sessions)

        assert result.errors[0].code == "STORE_ERROR"
        assert sessions.revoked == []


class TestRunDispatcher:
    def test_routes_by_input_type(
        self, owner: AdminIdentity, repo: MockAdminDirectory, sessions: MockSessionRevoker
    ) -> None:
        result = run(ListAdminsInput(actor=owner), repo=repo, sessions=sessions)

        assert len(result.admins) == 2  # type: ignore[union-attr]

    def test_unknown_input(self, repo: MockAdminDirectory, sessions: MockSessionRevoker) -> None:
        with pytest.raises(ValueError):
            run(object(), repo=repo, sessions=sessions)  # type: ignore[arg-type]
