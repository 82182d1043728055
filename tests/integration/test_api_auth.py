"""Login, logout and the admin gate over HTTP."""

from church_site.adapters.sqlite.repos import SQLiteAdminRepo, SQLiteUserRepo
from church_site.api import deps
from church_site.services.auth import provision_admin
from tests.conftest import ADMIN_EMAIL, ADMIN_PASSWORD, create_login, login


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "api"}


def test_login_wrong_password(client, admin_headers):
    response = client.post(
        "/api/auth/login", data={"username": ADMIN_EMAIL, "password": "nope"}
    )

    assert response.status_code == 401


def test_login_unknown_user(client):
    response = client.post(
        "/api/auth/login", data={"username": "ghost@example.com", "password": "x"}
    )

    assert response.status_code == 401


def test_me_without_token_is_401(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_me_with_garbage_token_is_401(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_admin_me(client, admin_headers):
    response = client.get("/api/auth/me", headers=admin_headers)

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == ADMIN_EMAIL
    assert body["display_name"] == "Rev. Kim"
    assert body["role"] == "admin"


def test_first_resolve_links_admin_row_to_login(client, admin_headers, test_db_path):
    client.get("/api/auth/me", headers=admin_headers)

    user = SQLiteUserRepo(test_db_path).get_by_email(ADMIN_EMAIL)
    record = SQLiteAdminRepo(test_db_path).get_by_email(ADMIN_EMAIL)
    assert record.user_id == user.id
    assert record.last_login is not None


def test_cookie_session(client, admin_headers):
    """The httponly cookie set at login authenticates on its own."""
    client.post(
        "/api/auth/login", data={"username": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )

    response = client.get("/api/auth/me")

    assert response.status_code == 200


def test_non_admin_is_403_and_signed_out(client, test_db_path):
    create_login(test_db_path, "member@church.example", "member-password")
    headers = login(client, "member@church.example", "member-password")

    first = client.get("/api/auth/me", headers=headers)
    second = client.get("/api/auth/me", headers=headers)

    assert first.status_code == 403
    assert second.status_code == 401


def test_non_admin_role_is_403(client, test_db_path):
    create_login(test_db_path, "editor@church.example", "editor-password")
    provision_admin(SQLiteAdminRepo(test_db_path), "editor@church.example", role="editor")
    headers = login(client, "editor@church.example", "editor-password")

    response = client.get("/api/admin/posts", headers=headers)

    assert response.status_code == 403


def test_logout_revokes_session(client, admin_headers):
    assert client.get("/api/auth/me", headers=admin_headers).status_code == 200

    response = client.post("/api/auth/logout", headers=admin_headers)

    assert response.status_code == 200
    assert client.get("/api/auth/me", headers=admin_headers).status_code == 401


def test_logout_without_session(client):
    assert client.post("/api/auth/logout").status_code == 200


def test_junk_tokens_leave_no_cached_contexts(client, test_db_path):
    create_login(test_db_path, "member@church.example", "member-password")
    member = login(client, "member@church.example", "member-password")

    for i in range(200):
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer junk-{i}"})
        assert response.status_code == 401
    assert client.get("/api/auth/me", headers=member).status_code == 403

    assert len(deps.get_context_registry(deps.get_rules())) == 0


def test_admin_context_kept_until_logout(client, admin_headers):
    registry = deps.get_context_registry(deps.get_rules())

    client.get("/api/auth/me", headers=admin_headers)
    assert len(registry) == 1

    client.post("/api/auth/logout", headers=admin_headers)
    assert len(registry) == 0
