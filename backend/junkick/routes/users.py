"""
Junkick Backend — User Route Handlers
=======================================

What:  GET /users/{id} and PATCH /users/{id}.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.database import get_db_session
from junkick.models.user import User
from junkick.routes.deps import get_current_user
from junkick.schemas.common import ErrorResponse
from junkick.schemas.user import UserEnvelope, UserUpdateRequest
from junkick.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/{user_id}",
    response_model=UserEnvelope,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Get a user profile",
)
async def get_user(
    user_id: str,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return UserEnvelope(user=await user_service.get_user(db, user_id))


@router.patch(
    "/{user_id}",
    response_model=UserEnvelope,
    responses={
        403: {"description": "Not your profile, or role change by non-admin", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
    },
    summary="Update a user profile",
)
async def update_user(
    user_id: str,
    payload: UserUpdateRequest,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> UserEnvelope:
    return UserEnvelope(user=await user_service.update_user(db, user_id, payload, caller))
