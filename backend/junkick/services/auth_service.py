"""
Junkick Backend — Auth Service
================================

What:  Registration, login and logout.
Why:   Credential handling stays out of the routes; the token format and the
       session audit trail are decided in one place.
How:   Passwords are hashed with passlib off the event loop; tokens come
       from `security.create_access_token`. Login and logout append a row to
       `sessions`, which is never updated or deleted.
"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.enums import SessionEvent
from junkick.exceptions import AuthenticationRequiredError, ConflictError
from junkick.models.user import Session, User
from junkick.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from junkick.services.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)


def _duplicate_email() -> ConflictError:
    return ConflictError(
        message="A user with this email already exists",
        code="DUPLICATE_ERROR",
        details={"field": "email"},
    )


def _auth_response(user: User) -> AuthResponse:
    return AuthResponse(
        user=UserResponse.model_validate(user),
        access_token=create_access_token(user.id, user.email, user.role),
    )


class AuthService:

    async def find_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def register(self, db: AsyncSession, payload: RegisterRequest) -> AuthResponse:
        """
        Create an account and log it in.

        Raises:
            ConflictError: DUPLICATE_ERROR when the email is taken (→ 409)
        """
        email = payload.email.strip().lower()
        if await self.find_by_email(db, email) is not None:
            raise _duplicate_email()

        data = payload.model_dump(exclude={"email", "password"})
        user = User(
            **data,
            email=email,
            password_hash=await hash_password(payload.password),
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Concurrent registration with the same email won the race
            raise _duplicate_email()

        logger.info("User registered: %s (role=%s)", user.id, user.role.value)
        return _auth_response(user)

    async def login(self, db: AsyncSession, payload: LoginRequest) -> AuthResponse:
        """
        Verify credentials and issue a token.

        Unknown email and wrong password produce the same error, so the
        response does not reveal which accounts exist.
        """
        user = await self.find_by_email(db, payload.email)
        if user is None or not await verify_password(payload.password, user.password_hash):
            logger.warning("Failed login for %s", payload.email)
            raise AuthenticationRequiredError(
                "Invalid email or password", code="INVALID_CREDENTIALS"
            )

        db.add(Session(user_id=user.id, type=SessionEvent.LOGIN))
        await db.flush()
        logger.info("User logged in: %s", user.id)
        return _auth_response(user)

    async def logout(self, db: AsyncSession, caller: Optional[User]) -> None:
        # Tokens are stateless; logout only records the event
        if caller is None:
            return
        db.add(Session(user_id=caller.id, type=SessionEvent.LOGOUT))
        await db.flush()
        logger.info("User logged out: %s", caller.id)


auth_service = AuthService()
