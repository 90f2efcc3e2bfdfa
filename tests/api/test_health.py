"""
tests/api/test_health.py

Smoke tests for the /health endpoint.

These are intentionally minimal — they verify that:
  1. The app starts without errors.
  2. The health route is reachable and returns the expected shape.
  3. The response reports the configured upload directory.
"""

from pathlib import Path

from fastapi.testclient import TestClient


class TestHealth:
    """Tests for GET /health."""

    def test_health_returns_200(self, client: TestClient) -> None:
        """Health endpoint must respond with HTTP 200."""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_response_shape(self, client: TestClient) -> None:
        """Response must contain 'status', 'version' and 'upload_root' fields."""
        body = client.get("/health").json()
        assert {"status", "version", "upload_root"} <= set(body)

    def test_health_status_is_ok(self, client: TestClient) -> None:
        """'status' field must equal 'ok'."""
        response = client.get("/health")
        assert response.json()["status"] == "ok"

    def test_health_version_is_string(self, client: TestClient) -> None:
        """'version' field must be a non-empty string."""
        version = client.get("/health").json()["version"]
        assert isinstance(version, str)
        assert len(version) > 0

    def test_health_reports_absolute_upload_root(self, client: TestClient, upload_root: Path) -> None:
        """The configured upload directory is reported resolved to an absolute path."""
        reported = client.get("/health").json()["upload_root"]
        assert Path(reported).is_absolute()
        assert Path(reported) == upload_root

    def test_health_content_type_is_json(self, client: TestClient) -> None:
        """Response Content-Type must be application/json."""
        response = client.get("/health")
        assert "application/json" in response.headers["content-type"]
