from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from church_site.adapters.auth.crypto import JWTAuthAdapter
from church_site.adapters.auth.session_store import InMemorySessionStore
from church_site.adapters.clock import SystemClock
from church_site.adapters.dev_email import DevEmailAdapter
from church_site.adapters.sqlite.migrator import SQLiteMigrator
from church_site.adapters.sqlite.repos import SQLiteAdminRepo, SQLiteUserRepo
from church_site.api import deps
from church_site.api.main import app
from church_site.rules.loader import load_rules
from church_site.rules.models import Rules
from church_site.services.auth import AuthService, provision_admin

PROJECT_ROOT = Path(__file__).resolve().parents[1]
RULES_PATH = PROJECT_ROOT / "rules.yaml"
MIGRATIONS_DIR = str(PROJECT_ROOT / "migrations")

ADMIN_EMAIL = "pastor@church.example"
ADMIN_PASSWORD = "correct horse battery staple"


@pytest.fixture
def rules() -> Rules:
    return load_rules(RULES_PATH)


@pytest.fixture
def test_db_path(tmp_path: Path) -> str:
    """A migrated, empty database."""
    db_path = str(tmp_path / "church.db")
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()
    return db_path


@pytest.fixture
def dev_email() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def client(
    test_db_path: str,
    tmp_path: Path,
    dev_email: DevEmailAdapter,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[TestClient]:
    """API client against the temp database, with mail captured by `dev_email`."""
    monkeypatch.setenv("CHURCH_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("CHURCH_RULES_PATH", str(RULES_PATH))
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    deps.reset_singletons()

    app.dependency_overrides[deps.get_email_adapter] = lambda: dev_email
    yield TestClient(app)
    app.dependency_overrides.clear()
    deps.reset_singletons()


def create_login(db_path: str, email: str, password: str, name: str | None = None) -> None:
    service = AuthService(
        SQLiteUserRepo(db_path), JWTAuthAdapter(), InMemorySessionStore(), SystemClock()
    )
    service.create_user(email, password, name)


def login(client: TestClient, email: str, password: str) -> dict[str, str]:
    """Log in and return an Authorization header (cookies are cleared)."""
    response = client.post("/api/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def admin_headers(client: TestClient, test_db_path: str) -> dict[str, str]:
    """Bearer header for a provisioned admin."""
    create_login(test_db_path, ADMIN_EMAIL, ADMIN_PASSWORD, "Pastor Kim")
    provision_admin(SQLiteAdminRepo(test_db_path), ADMIN_EMAIL, "Rev. Kim", "admin")
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD)
