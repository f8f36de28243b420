"""
Security Tests
==============

Tests for password hashing, token handling and the authentication
middleware's principal extraction.
"""

import uuid
from datetime import timedelta

from todolist.core.middleware import _bearer_token
from todolist.core.security import (
    ANONYMOUS,
    create_access_token,
    create_token_for_user,
    decode_token,
    hash_password,
    principal_from_token,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = hash_password("secret123")

    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_token_yields_authenticated_principal():
    token = create_token_for_user(uuid.uuid4(), "ada@example.com")["token"]

    principal = principal_from_token(token)

    assert principal.name == "ada@example.com"
    assert principal.authenticated
    assert not principal.is_anonymous


def test_user_token_lifetime_matches_expires_in(monkeypatch):
    monkeypatch.setattr("todolist.core.security.settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES", 90)

    issued = create_token_for_user(uuid.uuid4(), "ada@example.com")
    payload = decode_token(issued["token"])

    assert issued["expires_in"] == 90 * 60
    assert payload["exp"] - payload["iat"] == 90 * 60


def test_expired_token_is_anonymous():
    token = create_access_token({"sub": "ada@example.com"}, expires_delta=timedelta(seconds=-1))

    assert principal_from_token(token) == ANONYMOUS


def test_token_without_subject_is_anonymous():
    token = create_access_token({"uid": str(uuid.uuid4())}, timedelta(minutes=5))

    assert principal_from_token(token).is_anonymous


def test_missing_token_is_anonymous():
    assert principal_from_token(None) is ANONYMOUS
    assert principal_from_token("") is ANONYMOUS


def test_bearer_token_extraction():
    assert _bearer_token([(b"authorization", b"Bearer abc.def")]) == "abc.def"
    assert _bearer_token([(b"Authorization", b"bearer abc")]) == "abc"
    assert _bearer_token([(b"authorization", b"Basic dXNlcjpwdw==")]) is None
    assert _bearer_token([(b"authorization", b"Bearer ")]) is None
    assert _bearer_token([(b"accept", b"application/json")]) is None
