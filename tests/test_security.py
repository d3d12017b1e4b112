"""Token service, password hashing and the authorization decision."""

from datetime import timedelta

import pytest
from jose import jwt

from hr_backend.core.config import Settings
from hr_backend.core.exceptions import InvalidTokenError
from hr_backend.core.security import (
    TokenService, hash_password, verify_password, is_authorized,
)
from hr_backend.models.admin_user import AdminUser, AdminRole


@pytest.fixture
def tokens():
    return TokenService(Settings(_env_file=None, JWT_SECRET="unit-secret"))


def make_user(role=AdminRole.rh, permissions=None, user_id=7):
    user = AdminUser(id=user_id, login="ana", name="Ana", email="ana@example.com", role=role)
    user.permissions = permissions
    return user


def test_password_hash_round_trip():
    hashed = hash_password("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("wrong", hashed)


def test_issued_token_carries_identity_claims(tokens):
    claims = tokens.verify(tokens.issue(make_user(role=AdminRole.admin)))
    assert claims["sub"] == "7"
    assert claims["login"] == "ana"
    assert claims["role"] == "admin"
    assert claims["type"] == "access"


def test_expired_token_is_rejected(tokens):
    token = tokens.issue(make_user(), expires_delta=timedelta(seconds=-5))
    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


def test_token_signed_with_other_secret_is_rejected(tokens):
    other = TokenService(Settings(_env_file=None, JWT_SECRET="another-secret"))
    with pytest.raises(InvalidTokenError):
        tokens.verify(other.issue(make_user()))


def test_non_access_token_is_rejected(tokens):
    token = jwt.encode({"sub": "7", "type": "refresh"}, "unit-secret", algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


def test_malformed_token_is_rejected(tokens):
    with pytest.raises(InvalidTokenError):
        tokens.verify("not-a-jwt")


def test_admin_is_authorized_for_everything():
    admin = make_user(role=AdminRole.admin)
    assert is_authorized(admin, "employee", "delete")
    assert is_authorized(admin, "admin_user", "manage")


def test_rh_needs_an_explicit_true():
    user = make_user(permissions={
        "employee": {"create": True, "edit": False},
        "document": {"delete": "yes"},
    })
    assert is_authorized(user, "employee", "create")
    assert not is_authorized(user, "employee", "edit")
    assert not is_authorized(user, "employee", "delete")
    assert not is_authorized(user, "document", "delete")
    assert not is_authorized(user, "annotation", "create")


def test_rh_can_never_manage_admin_users():
    user = make_user(permissions={"admin_user": {"manage": True}})
    assert not is_authorized(user, "admin_user", "manage")


def test_rh_without_permission_document_is_denied():
    assert not is_authorized(make_user(), "employee", "create")
