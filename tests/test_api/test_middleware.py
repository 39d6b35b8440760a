"""Tests for request/correlation ID middleware."""

import re

UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


class TestCorrelationIdMiddleware:
    """Test X-Request-ID middleware behavior."""

    def test_generates_uuid_when_no_header(self, client):
        response = client.get("/health")

        request_id = response.headers.get("X-Request-ID")
        assert request_id is not None
        assert UUID_RE.match(request_id)

    def test_echoes_request_id(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_falls_back_to_correlation_id(self, client):
        response = client.get("/health", headers={"X-Correlation-ID": "corr-9"})
        assert response.headers["X-Request-ID"] == "corr-9"
