"""
Junkick Backend — Password and Token Tests
============================================
"""

import time
import uuid

import pytest
from jose import jwt

from junkick.config import settings
from junkick.enums import UserRole
from junkick.exceptions import AuthenticationRequiredError
from junkick.services.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


@pytest.mark.asyncio
async def test_password_round_trip():
    hashed = await hash_password("secret123")
    assert hashed != "secret123"
    assert await verify_password("secret123", hashed)
    assert not await verify_password("wrong", hashed)


@pytest.mark.asyncio
async def test_malformed_hash_is_a_mismatch():
    assert not await verify_password("secret123", "not-a-hash")


def test_token_claims():
    user_id = uuid.uuid4()
    token = create_access_token(user_id, "lead@example.com", UserRole.TEAM_LEAD)

    payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    assert payload["userId"] == str(user_id)
    assert payload["role"] == "team-lead"
    assert payload["exp"] - payload["iat"] == settings.jwt_expires_hours * 3600

    claims = decode_access_token(token)
    assert claims.user_id == user_id
    assert claims.role is UserRole.TEAM_LEAD


def test_expired_token():
    now = int(time.time())
    token = jwt.encode(
        {"userId": str(uuid.uuid4()), "email": "a@example.com", "role": "client",
         "iat": now - 7200, "exp": now - 3600},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    with pytest.raises(AuthenticationRequiredError) as exc_info:
        decode_access_token(token)
    assert exc_info.value.code == "TOKEN_EXPIRED"


@pytest.mark.parametrize("token", [
    "garbage",
    jwt.encode({"userId": str(uuid.uuid4()), "email": "a@example.com", "role": "client"},
               "another-secret", algorithm="HS256"),
    jwt.encode({"email": "a@example.com", "role": "client"},
               "test-secret-not-for-production", algorithm="HS256"),
])
def test_invalid_tokens(token):
    with pytest.raises(AuthenticationRequiredError) as exc_info:
        decode_access_token(token)
    assert exc_info.value.code == "INVALID_TOKEN"
