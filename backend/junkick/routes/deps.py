"""
Junkick Backend — Route Dependencies
======================================

What:  Resolve the caller from the `Authorization: Bearer <token>` header.
Why:   Routes declare whether identity is required (`get_current_user`) or
       optional (`get_optional_user`); services receive a `User` or None
       and never look at headers. The resolved id is also left on
       `request.state.caller_id` for the access log.

Failure codes (required auth, all 401):
    no header / not Bearer  → MISSING_TOKEN
    bad signature / format  → INVALID_TOKEN
    expired                 → TOKEN_EXPIRED
    subject deleted         → USER_NOT_FOUND
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.database import get_db_session
from junkick.exceptions import AuthenticationRequiredError
from junkick.models.user import User
from junkick.services.security import decode_access_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header is reported with our own error body
bearer_scheme = HTTPBearer(auto_error=False)


async def _resolve_user(request: Request, db: AsyncSession, token: str) -> User:
    claims = decode_access_token(token)
    user = await db.get(User, claims.user_id)
    if user is None:
        raise AuthenticationRequiredError("User no longer exists", code="USER_NOT_FOUND")
    # Read back by the access logger
    request.state.caller_id = user.id
    return user


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    if credentials is None or not credentials.credentials:
        raise AuthenticationRequiredError("Access token is required", code="MISSING_TOKEN")
    return await _resolve_user(request, db, credentials.credentials)


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> Optional[User]:
    """Like get_current_user, but any token problem means "anonymous"."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return await _resolve_user(request, db, credentials.credentials)
    except AuthenticationRequiredError as e:
        logger.debug("Ignoring unusable token on optional-auth route: %s", e.code)
        return None
