"""Tests for health check endpoints."""

from fastapi.testclient import TestClient


def test_health_check(client: TestClient) -> None:
    """Test basic health check endpoint."""
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "saladplanner-api"}


def test_root_endpoint(client: TestClient) -> None:
    """Test root endpoint returns API info."""
    response = client.get("/")
    assert response.status_code == 200

    data = response.json()
    assert data["name"] == "Saladplanner API"
    assert "version" in data
    assert data["docs"] == "/docs"


def test_request_without_session_is_rejected(client: TestClient) -> None:
    """Test that account endpoints require the session header."""
    response = client.get("/api/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "Not logged in"
