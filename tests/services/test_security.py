"""Tests for password hashing and access tokens."""

from __future__ import annotations

import pytest
from jose import jwt

from airport.services.errors import AuthenticationError
from airport.services.security import (
    ALGORITHM,
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("correct horse")
        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed)
        assert not verify_password("wrong horse", hashed)

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_malformed_hash(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    @pytest.fixture(autouse=True)
    def _secret(self, monkeypatch):
        monkeypatch.setenv("AIRPORT_JWT_SECRET", "test-secret")

    def test_round_trip(self):
        token = create_access_token(7, "ops@example.com", ["staff"])
        claims = decode_access_token(token)
        assert claims["sub"] == "7"
        assert claims["email"] == "ops@example.com"
        assert claims["roles"] == ["staff"]

    def test_expired(self):
        token = create_access_token(7, "ops@example.com", [], expires_minutes=-5)
        with pytest.raises(AuthenticationError, match="Invalid token"):
            decode_access_token(token)

    def test_wrong_secret(self, monkeypatch):
        token = create_access_token(7, "ops@example.com", [])
        monkeypatch.setenv("AIRPORT_JWT_SECRET", "another-secret")
        with pytest.raises(AuthenticationError, match="Invalid token"):
            decode_access_token(token)

    def test_missing_subject(self):
        token = jwt.encode({"email": "ops@example.com"}, "test-secret", algorithm=ALGORITHM)
        with pytest.raises(AuthenticationError, match="missing subject"):
            decode_access_token(token)

    def test_garbage(self):
        with pytest.raises(AuthenticationError):
            decode_access_token("not.a.token")
