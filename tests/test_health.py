"""
Smoke tests for the root and health endpoints and the error envelope.
"""
from fastapi.testclient import TestClient

from app.main import app


def test_api_root(client):
    response = client.get("/api")

    assert response.status_code == 200
    assert response.json()["message"] == "CVForge API"


def test_health_reports_database(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["database"] == "connected"


def test_unknown_route_uses_envelope(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found"}


def test_unhandled_error_is_generic(client, make_user, auth_headers):
    # a broken dependency stands in for an unexpected failure
    from app.core.gating import get_authorization_policy

    def broken_policy():
        raise RuntimeError("boom")

    app.dependency_overrides[get_authorization_policy] = broken_policy
    user = make_user()
    response = TestClient(app, raise_server_exceptions=False).get("/api/resume/some-id", headers=auth_headers(user))

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert response.json()["message"] == "Server Error"
    assert "error" not in response.json()


def test_error_detail_only_in_development(client, make_user, auth_headers):
    from unittest.mock import patch
    from app.core.gating import get_authorization_policy

    def broken_policy():
        raise RuntimeError("boom")

    app.dependency_overrides[get_authorization_policy] = broken_policy
    user = make_user()
    with patch("app.main.config.ENVIRONMENT", "development"):
        response = TestClient(app, raise_server_exceptions=False).get("/api/resume/some-id", headers=auth_headers(user))

    assert response.status_code == 500
    assert response.json()["error"] == "boom"


def test_environment_defaults_to_production(monkeypatch):
    import importlib
    from app.core import config

    monkeypatch.delenv("ENVIRONMENT")
    try:
        importlib.reload(config)
        assert config.ENVIRONMENT == "production"
    finally:
        monkeypatch.setenv("ENVIRONMENT", "test")
        importlib.reload(config)
