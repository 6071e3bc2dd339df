import pytest
from fastapi import HTTPException

from finance_tracker.core.config import Settings
from finance_tracker.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)

config = Settings(JWT_SECRET_KEY="test-secret")


def test_password_hash_round_trip():
    hashed = get_password_hash("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("hunter23", hashed)


def test_garbage_hash_does_not_verify():
    assert not verify_password("hunter22", "plain-text")


def test_token_round_trip():
    token = create_access_token({"sub": "u1", "role": "user"}, config)
    payload = decode_access_token(token, config)
    assert payload["sub"] == "u1"
    assert payload["role"] == "user"
    assert "exp" in payload


def test_token_signed_with_another_secret_is_rejected():
    token = create_access_token({"sub": "u1"}, Settings(JWT_SECRET_KEY="other-secret"))
    with pytest.raises(HTTPException) as excinfo:
        decode_access_token(token, config)
    assert excinfo.value.status_code == 401


def test_expired_token_is_rejected():
    expired = Settings(JWT_SECRET_KEY="test-secret", JWT_ACCESS_TOKEN_EXPIRE_MINUTES=-1)
    token = create_access_token({"sub": "u1"}, expired)
    with pytest.raises(HTTPException):
        decode_access_token(token, config)
