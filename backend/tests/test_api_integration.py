"""Integration tests for the public API surface."""

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from studycards import main
from studycards.agents import reset_scoring_client
from studycards.main import app


@pytest.fixture
def client():
    """Create a test client."""
    return TestClient(app)


def cosmos_available():
    """Check if Cosmos DB is available for integration tests."""
    try:
        from studycards.db.cosmos import verify_connection
        return verify_connection()
    except Exception:
        return False


class TestHealthEndpoint:
    """Tests for the public endpoints."""

    def test_healthz_no_user_required(self, client):
        response = client.get("/healthz")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_root_lists_endpoints(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["endpoints"]["review"] == "/review/next"


class TestIdentity:
    """Owner-scoped endpoints need the X-User-Id header."""

    @pytest.mark.parametrize("path", ["/cards", "/review/next", "/review/due-count", "/review/learning"])
    def test_missing_user_id(self, client, path):
        response = client.get(path)
        assert response.status_code == 401
        assert "X-User-Id" in response.json()["detail"]

    def test_blank_user_id(self, client):
        response = client.get("/review/due-count", headers={"X-User-Id": "   "})
        assert response.status_code == 401

    @pytest.mark.skipif(not cosmos_available(), reason="Cosmos DB not available")
    def test_due_count_against_cosmos(self, client):
        response = client.get("/review/due-count", headers={"X-User-Id": "test-user-123"})
        assert response.status_code == 200
        assert "count" in response.json()


class TestStartup:
    """Startup checks run by the app lifespan."""

    def _settings(self, configured=True, auto_create=False):
        return SimpleNamespace(
            is_configured=lambda: configured, auto_create=auto_create, database_name="testdb"
        )

    def test_provisions_container_when_auto_create(self, monkeypatch):
        calls = []
        monkeypatch.setattr(main, "get_settings", lambda: self._settings(auto_create=True))
        monkeypatch.setattr(main, "ensure_cards_container", lambda: calls.append("ensure"))
        monkeypatch.setattr(main, "verify_connection", lambda: calls.append("verify") or True)

        main._check_card_store()

        assert calls == ["ensure", "verify"]

    def test_skips_store_when_not_configured(self, monkeypatch):
        monkeypatch.setattr(main, "get_settings", lambda: self._settings(configured=False))
        monkeypatch.setattr(main, "verify_connection", lambda: pytest.fail("should not connect"))

        main._check_card_store()

    def test_cors_origins_are_trimmed(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", " http://a.test , ,http://b.test")
        assert main._cors_origins() == ["http://a.test", "http://b.test"]

    def test_ai_scoring_disabled_by_malformed_timeout(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
        monkeypatch.setenv("AZURE_OPENAI_RESPONSES_DEPLOYMENT_NAME", "gpt-test")
        monkeypatch.setenv("AI_SCORING_TIMEOUT_SECONDS", "fifteen")
        reset_scoring_client()
        try:
            assert main._check_ai_scoring() is False
        finally:
            reset_scoring_client()

    def test_ai_scoring_enabled_when_configured(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com")
        monkeypatch.setenv("AZURE_OPENAI_RESPONSES_DEPLOYMENT_NAME", "gpt-test")
        monkeypatch.delenv("AI_SCORING_TIMEOUT_SECONDS", raising=False)
        reset_scoring_client()
        try:
            assert main._check_ai_scoring() is True
        finally:
            reset_scoring_client()
