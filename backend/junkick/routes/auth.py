"""
Junkick Backend — Auth Route Handlers
=======================================

What:  POST /auth/register, POST /auth/login, POST /auth/logout, GET /auth/me.
How:   Thin wrappers: validate the body, delegate to AuthService, return JSON.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.database import get_db_session
from junkick.models.user import User
from junkick.routes.deps import get_current_user, get_optional_user
from junkick.schemas.common import ErrorResponse
from junkick.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserEnvelope, UserResponse
from junkick.services.auth_service import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Invalid registration data", "model": ErrorResponse},
        409: {"description": "Email already registered", "model": ErrorResponse},
    },
    summary="Create an account",
)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.register(db, payload)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Exchange credentials for an access token",
)
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> AuthResponse:
    return await auth_service.login(db, payload)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Record a logout",
    description="Tokens are stateless; the client discards its token. Always 204.",
)
async def logout(
    caller: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await auth_service.logout(db, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/me",
    response_model=UserEnvelope,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="Current caller's profile",
)
async def me(caller: User = Depends(get_current_user)) -> UserEnvelope:
    return UserEnvelope(user=UserResponse.model_validate(caller))
