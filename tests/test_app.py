"""Application wiring: health, middleware headers, error bodies, login rate limit."""

import pytest
from fastapi.testclient import TestClient

from conftest import ADMIN_LOGIN
from hr_backend.main import create_app


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers["X-Request-Id"]


def test_request_id_is_echoed_when_well_formed(client):
    resp = client.get("/api/health", headers={"X-Request-Id": "abc-123"})
    assert resp.headers["X-Request-Id"] == "abc-123"

    resp = client.get("/api/health", headers={"X-Request-Id": "not valid / id"})
    assert resp.headers["X-Request-Id"] != "not valid / id"


def test_unknown_route_uses_error_body(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.json()["status"] == "fail"


def test_bootstrap_admin_is_created_once(settings, storage, mailer, db):
    from hr_backend.models.admin_user import AdminUser

    with TestClient(create_app(settings, storage=storage, mailer=mailer)):
        pass
    assert db.query(AdminUser).filter(AdminUser.login == ADMIN_LOGIN).count() == 1


@pytest.fixture
def limited_client(settings, storage, mailer):
    limited = settings.model_copy(update={"RATE_LIMIT_ENABLED": True, "LOGIN_RATE_LIMIT": "2/minute"})
    with TestClient(create_app(limited, storage=storage, mailer=mailer)) as c:
        yield c


def test_login_is_rate_limited(limited_client):
    body = {"login": ADMIN_LOGIN, "password": "wrong"}
    assert limited_client.post("/api/admin-users/login", json=body).status_code == 401
    assert limited_client.post("/api/admin-users/login", json=body).status_code == 401
    resp = limited_client.post("/api/admin-users/login", json=body)
    assert resp.status_code == 429
    assert resp.json()["status"] == "fail"
    assert resp.json()["message"] == "Muitas tentativas. Tente novamente mais tarde."


def test_rate_limit_is_per_application(limited_client, client):
    body = {"login": ADMIN_LOGIN, "password": "wrong"}
    for _ in range(3):
        limited_client.post("/api/admin-users/login", json=body)
    assert client.post("/api/admin-users/login", json=body).status_code == 401


def test_forgot_password_shares_the_login_limit_setting(limited_client):
    body = {"email": "ninguem@example.com"}
    assert limited_client.post("/api/admin-users/forgot-password", json=body).status_code == 200
    assert limited_client.post("/api/admin-users/forgot-password", json=body).status_code == 200
    assert limited_client.post("/api/admin-users/forgot-password", json=body).status_code == 429
