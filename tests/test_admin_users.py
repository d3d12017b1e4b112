"""Admin user lifecycle: login, registration, self-protection, password reset."""

import re
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest

from conftest import ADMIN_LOGIN, ADMIN_PASSWORD, login
from hr_backend.core.exceptions import AuthorizationError
from hr_backend.models.admin_user import AdminUser, AdminRole
from hr_backend.services.audit_service import utcnow
from hr_backend.services.auth_service import auth_service, LAST_ADMIN_MESSAGE


def _admin(db):
    return db.query(AdminUser).filter(AdminUser.login == ADMIN_LOGIN).one()


def test_login_returns_token_and_projection(client):
    resp = client.post("/api/admin-users/login", json={"login": ADMIN_LOGIN, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["token"]
    assert body["token_type"] == "bearer"
    assert body["user"]["role"] == "admin"
    assert "hashed_password" not in body["user"]


def test_login_with_wrong_password_is_401(client):
    resp = client.post("/api/admin-users/login", json={"login": ADMIN_LOGIN, "password": "nope"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Credenciais inválidas."


def test_login_of_inactive_user_is_403(client, admin_headers):
    resp = client.post("/api/admin-users/register", json={
        "login": "dormindo", "password": "secret123", "name": "Dormindo",
        "email": "dormindo@example.com", "is_active": False,
    }, headers=admin_headers)
    assert resp.status_code == 201
    resp = client.post("/api/admin-users/login", json={"login": "dormindo", "password": "secret123"})
    assert resp.status_code == 403


def test_me_returns_caller(client, admin_headers):
    resp = client.get("/api/admin-users/me", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["login"] == ADMIN_LOGIN


def test_register_normalizes_case_and_email(client, admin_headers):
    resp = client.post("/api/admin-users/register", json={
        "login": "JOANA", "password": "secret123", "name": "JOANA DA SILVA",
        "email": "Joana@Example.COM",
    }, headers=admin_headers)
    assert resp.status_code == 201
    body = resp.json()
    assert body["login"] == "Joana"
    assert body["name"] == "Joana Da Silva"
    assert body["email"] == "joana@example.com"
    assert body["role"] == "rh"

    for typed in ("JOANA", "joana", "Joana", " Joana "):
        resp = client.post("/api/admin-users/login", json={"login": typed, "password": "secret123"})
        assert resp.status_code == 200, typed
        assert resp.json()["user"]["login"] == "Joana"


def test_register_duplicate_login_is_409(client, create_admin_user, admin_headers):
    create_admin_user("repetido")
    resp = client.post("/api/admin-users/register", json={
        "login": "repetido", "password": "secret123", "name": "Outro",
        "email": "outro@example.com",
    }, headers=admin_headers)
    assert resp.status_code == 409


def test_register_login_differing_only_in_case_is_409(client, create_admin_user, admin_headers):
    create_admin_user("repetido")
    resp = client.post("/api/admin-users/register", json={
        "login": "REPETIDO", "password": "secret123", "name": "Outro",
        "email": "outro@example.com",
    }, headers=admin_headers)
    assert resp.status_code == 409
    assert resp.json()["message"] == "Nome de usuário (login) já existe."


def test_register_rejects_unknown_permission_resource(client, admin_headers):
    resp = client.post("/api/admin-users/register", json={
        "login": "estranho", "password": "secret123", "name": "Estranho",
        "email": "estranho@example.com", "permissions": {"payroll": {"edit": True}},
    }, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["errors"] == ["permissions.payroll: recurso desconhecido"]


def test_admin_role_does_not_keep_permissions(client, create_admin_user):
    user, _ = create_admin_user("superior", role="admin", permissions={"employee": {"edit": True}})
    assert user["permissions"] is None


def test_cannot_change_own_role_status_or_permissions(client, admin_headers, db):
    admin_id = _admin(db).id
    for body in ({"role": "rh"}, {"is_active": False}, {"permissions": {}}):
        resp = client.put(f"/api/admin-users/{admin_id}", json=body, headers=admin_headers)
        assert resp.status_code == 403
    resp = client.put(
        f"/api/admin-users/{admin_id}/permissions",
        json={"permissions": {"employee": {"edit": True}}},
        headers=admin_headers,
    )
    assert resp.status_code == 403


def test_can_change_own_name(client, admin_headers, db):
    resp = client.put(
        f"/api/admin-users/{_admin(db).id}", json={"name": "Chefe Geral"}, headers=admin_headers
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Chefe Geral"


def test_cannot_delete_self(client, admin_headers, db):
    resp = client.delete(f"/api/admin-users/{_admin(db).id}", headers=admin_headers)
    assert resp.status_code == 403


def test_permissions_only_apply_to_rh(client, admin_headers, create_admin_user):
    user, _ = create_admin_user("outrochefe", role="admin")
    resp = client.put(
        f"/api/admin-users/{user['id']}/permissions",
        json={"permissions": {"employee": {"edit": True}}},
        headers=admin_headers,
    )
    assert resp.status_code == 400


def test_last_admin_cannot_be_demoted_or_deleted(db):
    admin = _admin(db)
    with pytest.raises(AuthorizationError) as excinfo:
        auth_service.update_user(db, 999, admin.id, {"role": AdminRole.rh})
    assert excinfo.value.message == LAST_ADMIN_MESSAGE

    with pytest.raises(AuthorizationError):
        auth_service.update_user(db, 999, admin.id, {"is_active": False})

    with pytest.raises(AuthorizationError):
        auth_service.delete_user(db, 999, admin.id)

    db.expire_all()
    admin = _admin(db)
    assert admin.role == AdminRole.admin
    assert admin.is_active


def test_second_admin_can_be_demoted(client, admin_headers, create_admin_user):
    user, _ = create_admin_user("vice", role="admin")
    resp = client.put(f"/api/admin-users/{user['id']}", json={"role": "rh"}, headers=admin_headers)
    assert resp.status_code == 200


def test_remaining_admin_is_protected_after_demoting_the_other(client, db, admin_headers, create_admin_user):
    user, _ = create_admin_user("vice", role="admin")
    resp = client.put(f"/api/admin-users/{user['id']}", json={"role": "rh"}, headers=admin_headers)
    assert resp.status_code == 200

    db.expire_all()
    with pytest.raises(AuthorizationError) as excinfo:
        auth_service.update_user(db, user["id"], _admin(db).id, {"role": AdminRole.rh})
    assert excinfo.value.message == LAST_ADMIN_MESSAGE


def test_concurrent_demotions_of_the_sole_admin_are_both_refused(client, db):
    admin_id = _admin(db).id
    session_factory = client.app.state.session_factory
    barrier = threading.Barrier(2)

    def demote():
        session = session_factory()
        try:
            barrier.wait(timeout=5)
            auth_service.update_user(session, 999, admin_id, {"role": AdminRole.rh})
        except AuthorizationError as exc:
            return exc.message
        finally:
            session.close()
        return None

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(lambda _: demote(), range(2)))

    assert outcomes == [LAST_ADMIN_MESSAGE, LAST_ADMIN_MESSAGE]
    db.expire_all()
    admin = _admin(db)
    assert admin.role == AdminRole.admin
    assert admin.is_active


def test_delete_user_invalidates_their_token(client, admin_headers, create_admin_user):
    user, headers = create_admin_user("temporario")
    resp = client.delete(f"/api/admin-users/{user['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert client.get("/api/admin-users/me", headers=headers).status_code == 401


def test_delete_user_with_history_is_409(client, admin_headers, create_admin_user, employee):
    user, headers = create_admin_user("editor", permissions={"employee": {"edit": True}})
    resp = client.put(
        f"/api/employees/{employee['id']}", json={"position": "Gerente"}, headers=headers
    )
    assert resp.status_code == 200

    resp = client.delete(f"/api/admin-users/{user['id']}", headers=admin_headers)
    assert resp.status_code == 409


def test_change_password(client, admin_headers):
    resp = client.put("/api/admin-users/change-password", json={
        "current_password": "wrong", "new_password": "novasenha",
    }, headers=admin_headers)
    assert resp.status_code == 401

    resp = client.put("/api/admin-users/change-password", json={
        "current_password": ADMIN_PASSWORD, "new_password": "novasenha",
    }, headers=admin_headers)
    assert resp.status_code == 200
    assert login(client, ADMIN_LOGIN, "novasenha")


def _reset_token_from(mailer):
    match = re.search(r"/reset-password/([0-9a-f]{64})", mailer.sent[-1]["body"])
    assert match
    return match.group(1)


def test_password_reset_flow(client, mailer):
    resp = client.post("/api/admin-users/forgot-password", json={"email": "ADMIN@admin.com"})
    assert resp.status_code == 200
    assert mailer.sent[-1]["to"] == "admin@admin.com"
    assert "http://frontend.test/reset-password/" in mailer.sent[-1]["body"]
    token = _reset_token_from(mailer)

    resp = client.post(f"/api/admin-users/reset-password/{token}", json={"new_password": "trocada1"})
    assert resp.status_code == 200
    assert login(client, ADMIN_LOGIN, "trocada1")

    resp = client.post(f"/api/admin-users/reset-password/{token}", json={"new_password": "outra123"})
    assert resp.status_code == 400


def test_forgot_password_for_unknown_email_looks_the_same(client, mailer):
    resp = client.post("/api/admin-users/forgot-password", json={"email": "ninguem@example.com"})
    assert resp.status_code == 200
    assert mailer.sent == []


def test_expired_reset_token_is_rejected(client, mailer, db):
    client.post("/api/admin-users/forgot-password", json={"email": "admin@admin.com"})
    token = _reset_token_from(mailer)

    admin = _admin(db)
    admin.password_reset_expires = utcnow() - timedelta(minutes=1)
    db.commit()

    resp = client.post(f"/api/admin-users/reset-password/{token}", json={"new_password": "trocada1"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Token inválido ou expirado."


def test_stored_reset_token_is_hashed(client, mailer, db):
    client.post("/api/admin-users/forgot-password", json={"email": "admin@admin.com"})
    token = _reset_token_from(mailer)
    stored = _admin(db).password_reset_token
    assert stored and stored != token


def test_list_admin_users(client, admin_headers, create_admin_user):
    create_admin_user("listado")
    resp = client.get("/api/admin-users", headers=admin_headers)
    assert resp.status_code == 200
    assert {u["login"] for u in resp.json()} >= {ADMIN_LOGIN, "listado"}
