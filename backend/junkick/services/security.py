"""
Junkick Backend — Password Hashing and Access Tokens
======================================================

What:  Hash/verify passwords and issue/verify JWT access tokens.
How:   passlib CryptContext (pbkdf2_sha256) for passwords, python-jose for
       HS256 tokens. Hashing is CPU-bound, so the async wrappers run it in
       Starlette's thread pool instead of blocking the event loop.

Token payload:
    {"userId": "<uuid>", "email": "...", "role": "team-lead",
     "iat": 1700000000, "exp": 1700086400}
"""

import time
import uuid
from dataclasses import dataclass
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from junkick.config import Settings, settings as default_settings
from junkick.enums import UserRole
from junkick.exceptions import AuthenticationRequiredError

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


async def hash_password(plain: str) -> str:
    return await run_in_threadpool(pwd_context.hash, plain)


async def verify_password(plain: str, hashed: str) -> bool:
    # Malformed stored hashes count as a mismatch, not a server error
    try:
        return await run_in_threadpool(pwd_context.verify, plain, hashed)
    except (ValueError, TypeError):
        return False


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    email: str
    role: UserRole


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    config: Optional[Settings] = None,
) -> str:
    config = config or default_settings
    now = int(time.time())
    payload = {
        "userId": str(user_id),
        "email": email,
        "role": role.value,
        "iat": now,
        "exp": now + config.jwt_expires_hours * 3600,
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: Optional[Settings] = None) -> TokenClaims:
    """
    Verify signature and expiry and return the claims.

    Raises:
        AuthenticationRequiredError: TOKEN_EXPIRED or INVALID_TOKEN.
    """
    config = config or default_settings
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthenticationRequiredError("Access token has expired", code="TOKEN_EXPIRED")
    except JWTError:
        raise AuthenticationRequiredError("Invalid access token", code="INVALID_TOKEN")

    try:
        return TokenClaims(
            user_id=uuid.UUID(payload["userId"]),
            email=payload["email"],
            role=UserRole(payload["role"]),
        )
    except (KeyError, ValueError, TypeError):
        raise AuthenticationRequiredError("Invalid access token", code="INVALID_TOKEN")
