"""Shared fixtures: an app on a throwaway SQLite file with in-memory storage and mail."""

import pytest
from fastapi.testclient import TestClient

from hr_backend.core.config import Settings
from hr_backend.core.exceptions import StorageError
from hr_backend.main import create_app

ADMIN_LOGIN = "admin"
ADMIN_PASSWORD = "admin123"


class FakeStorage:
    """Keeps objects in a dict instead of a MinIO bucket."""

    def __init__(self):
        self.objects = {}
        self.fail_deletes = False

    def ensure_bucket(self):
        pass

    def put_object(self, key, content, content_type):
        self.objects[key] = (content, content_type)
        return key

    def get_presigned_url(self, key, expires_minutes=15):
        return f"http://storage.test/{key}"

    def delete_object(self, key):
        if self.fail_deletes:
            raise StorageError(f"cannot delete {key}")
        self.objects.pop(key, None)


class FakeMailer:
    """Records messages instead of sending them."""

    def __init__(self):
        self.sent = []

    def is_configured(self):
        return True

    def send(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})
        return True


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DATABASE_URL=f"sqlite:///{tmp_path / 'hr.db'}",
        JWT_SECRET="test-secret",
        RATE_LIMIT_ENABLED=False,
        FRONTEND_URL="http://frontend.test",
        DEFAULT_ADMIN_LOGIN=ADMIN_LOGIN,
        DEFAULT_ADMIN_PASSWORD=ADMIN_PASSWORD,
    )


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def app(settings, storage, mailer):
    return create_app(settings, storage=storage, mailer=mailer)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(client, app):
    session = app.state.session_factory()
    yield session
    session.close()


def login(client, username, password):
    resp = client.post("/api/admin-users/login", json={"login": username, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["token"]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(client):
    return bearer(login(client, ADMIN_LOGIN, ADMIN_PASSWORD))


@pytest.fixture
def create_admin_user(client, admin_headers):
    """Register an identity through the API; returns ``(user_json, headers)``."""

    def _create(login_name, role="rh", permissions=None, password="secret123"):
        payload = {
            "login": login_name,
            "password": password,
            "name": login_name.title(),
            "email": f"{login_name}@example.com",
            "role": role,
        }
        if permissions is not None:
            payload["permissions"] = permissions
        resp = client.post("/api/admin-users/register", json=payload, headers=admin_headers)
        assert resp.status_code == 201, resp.text
        return resp.json(), bearer(login(client, login_name, password))

    return _create


def employee_payload(**overrides):
    payload = {
        "full_name": "Maria Souza",
        "registration_number": "M-001",
        "institutional_link": "Efetivo",
        "position": "Analista",
        "department": "Financeiro",
        "admission_date": "2020-03-01",
        "date_of_birth": "1990-05-12",
        "gender": "Feminino",
        "marital_status": "Solteiro(a)",
        "has_children": False,
        "cpf": "12345678901",
        "rg": "1234567",
        "address_street": "Rua das Flores",
        "address_number": "100",
        "address_neighborhood": "Centro",
        "address_city": "Recife",
        "address_state": "PE",
        "address_zip_code": "50000000",
        "emergency_contact_phone": "81999990000",
        "mobile_phone1": "81988880000",
        "institutional_email": "maria.souza@org.gov.br",
        "functional_status": "Ativo",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def employee(client, admin_headers):
    resp = client.post("/api/employees", json=employee_payload(), headers=admin_headers)
    assert resp.status_code == 201, resp.text
    return resp.json()
