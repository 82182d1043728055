"""Startup and shutdown of the FastAPI app."""

from fastapi.testclient import TestClient

from church_site.adapters.resend_email import ResendEmailAdapter
from church_site.api import deps
from church_site.api.main import app
from tests.conftest import RULES_PATH


def test_startup_migrates_and_shutdown_closes_resend_client(tmp_path, monkeypatch):
    monkeypatch.setenv("CHURCH_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CHURCH_RULES_PATH", str(RULES_PATH))
    monkeypatch.setenv("RESEND_API_KEY", "re_test_key")
    deps.reset_singletons()

    try:
        with TestClient(app) as client:
            assert client.get("/api/public/posts").status_code == 200
            adapter = deps.get_email_adapter(deps.get_settings(), deps.get_rules())
            assert isinstance(adapter, ResendEmailAdapter)
            assert not adapter._client.is_closed

        assert adapter._client.is_closed
        assert deps._email_adapter_instance is None
        assert (tmp_path / "data" / "church.db").exists()
    finally:
        deps.reset_singletons()
