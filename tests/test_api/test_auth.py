"""Tests for bearer-token authentication."""

import pytest
from fastapi.testclient import TestClient

from memstore.api.auth import verify_api_key
from memstore.config.settings import get_settings


@pytest.fixture
def secured_client(app, monkeypatch) -> TestClient:
    """Client with the real auth dependency and a configured key."""
    monkeypatch.setenv("MEMSTORE_API_KEY", "secret-key")
    get_settings.cache_clear()
    app.dependency_overrides.pop(verify_api_key, None)
    return TestClient(app)


class TestAuthEnabled:
    def test_valid_token(self, secured_client):
        response = secured_client.post(
            "/v3/search",
            json={"q": "x"},
            headers={"Authorization": "Bearer secret-key"},
        )
        assert response.status_code == 200

    @pytest.mark.parametrize(
        "header",
        [None, "Bearer wrong", "secret-key", "bearer secret-key", "Bearer  secret-key", "Token secret-key"],
    )
    def test_rejected_tokens(self, secured_client, mock_manager, header):
        headers = {"Authorization": header} if header else {}

        response = secured_client.post("/v3/search", json={"q": "x"}, headers=headers)

        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        mock_manager.query.assert_not_called()

    @pytest.mark.parametrize(
        "method,path",
        [
            ("POST", "/v3/documents"),
            ("POST", "/v3/documents/list"),
            ("GET", "/v3/documents/doc-1"),
            ("DELETE", "/v4/memories"),
            ("POST", "/v4/search"),
            ("GET", "/v3/settings"),
        ],
    )
    def test_every_data_route_protected(self, secured_client, method, path):
        response = secured_client.request(method, path)
        assert response.status_code == 401

    def test_health_is_open(self, secured_client):
        response = secured_client.get("/health")
        assert response.status_code == 200


class TestAuthDisabled:
    def test_no_key_configured_allows_requests(self, app):
        app.dependency_overrides.pop(verify_api_key, None)
        client = TestClient(app)

        response = client.post("/v3/search", json={"q": "x"})

        assert response.status_code == 200
