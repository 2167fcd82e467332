"""Tests for JWT issuing and verification."""

from __future__ import annotations

import time

import jwt
import pytest
from fastapi import HTTPException

from helpdesk_kb.api.auth import decode_token, issue_token


def test_jwt_encode_decode():
    secret = "test-secret"
    payload = {"sub": "test-key", "iat": int(time.time()), "exp": int(time.time()) + 3600}
    token = jwt.encode(payload, secret, algorithm="HS256")
    decoded = jwt.decode(token, secret, algorithms=["HS256"])
    assert decoded["sub"] == "test-key"


def test_issue_token_round_trip(settings):
    token = issue_token("test-api-key", settings)
    claims = decode_token(token, settings)
    assert claims["sub"] == "pi-key"
    assert claims["exp"] - claims["iat"] == settings.jwt_expiry_minutes * 60


def test_expired_token_rejected(settings):
    payload = {"sub": "x", "iat": int(time.time()) - 7200, "exp": int(time.time()) - 3600}
    token = jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)
    with pytest.raises(HTTPException) as exc_info:
        decode_token(token, settings)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Token has expired"


def test_wrong_secret_rejected(settings):
    payload = {"sub": "x", "iat": int(time.time()), "exp": int(time.time()) + 3600}
    token = jwt.encode(payload, "wrong-secret", algorithm="HS256")
    with pytest.raises(HTTPException) as exc_info:
        decode_token(token, settings)
    assert exc_info.value.detail == "Invalid token"


def test_valid_api_keys_parsing(settings):
    settings.api_keys = " a , b,,c "
    assert settings.valid_api_keys == ["a", "b", "c"]
