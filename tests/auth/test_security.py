"""
Tests for password hashing, token handling and principal extraction.
"""
from datetime import timedelta
import pytest
from jose import jwt

from hnms.auth.exceptions import InvalidTokenException
from hnms.auth.models import UserRole
from hnms.config import settings
from hnms.core.permissions import Principal
from hnms.core.security import (
    create_access_token,
    hash_password,
    verify_password,
    verify_token,
)


def test_hash_and_verify_password():
    hashed = hash_password("correct horse")
    assert hashed != "correct horse"
    assert verify_password("correct horse", hashed) is True
    assert verify_password("wrong horse", hashed) is False


@pytest.mark.parametrize("plain, hashed", [
    ("", "irrelevant"),
    ("secret", ""),
    ("secret", None),
    ("secret", "not-a-bcrypt-hash"),
])
def test_verify_password_fails_closed(plain, hashed):
    assert verify_password(plain, hashed) is False


def test_token_round_trip_claims():
    token = create_access_token({"id": 7, "email": "a@example.com", "role": "DOCTOR", "hospitalId": 3})
    claims = verify_token(token)
    assert claims["id"] == 7
    assert claims["role"] == "DOCTOR"
    assert claims["hospitalId"] == 3
    assert claims["exp"] > claims["iat"]


def test_default_token_lifetime_is_24_hours():
    token = create_access_token({"id": 1, "role": "ADMIN", "hospitalId": 1})
    claims = verify_token(token)
    assert claims["exp"] - claims["iat"] == 24 * 60 * 60


def test_expired_token_rejected():
    token = create_access_token({"id": 1, "role": "ADMIN"}, expires_delta=timedelta(seconds=-10))
    with pytest.raises(InvalidTokenException):
        verify_token(token)


def test_token_signed_with_other_key_rejected():
    token = jwt.encode({"id": 1, "role": "ADMIN"}, "another-secret", algorithm=settings.algorithm)
    with pytest.raises(InvalidTokenException):
        verify_token(token)


def test_malformed_token_rejected():
    with pytest.raises(InvalidTokenException):
        verify_token("not.a.token")


def test_principal_from_claims():
    principal = Principal.from_claims({"id": 5, "role": "NURSE", "hospitalId": 2, "email": "n@example.com"})
    assert principal == Principal(id=5, role=UserRole.NURSE, tenant_id=2, email="n@example.com")
    assert principal.is_super_admin is False


def test_super_admin_principal_without_hospital():
    principal = Principal.from_claims({"id": 1, "role": "SUPER_ADMIN", "hospitalId": None})
    assert principal.tenant_id is None
    assert principal.is_super_admin is True


@pytest.mark.parametrize("claims", [
    {"role": "ADMIN", "hospitalId": 1},
    {"id": "1", "role": "ADMIN", "hospitalId": 1},
    {"id": 1, "role": "JANITOR", "hospitalId": 1},
    {"id": 1, "hospitalId": 1},
    {"id": 1, "role": "ADMIN", "hospitalId": "1"},
])
def test_principal_from_invalid_claims(claims):
    with pytest.raises(InvalidTokenException):
        Principal.from_claims(claims)
