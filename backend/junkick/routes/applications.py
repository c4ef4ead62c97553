"""
Junkick Backend — Application Route Handlers
==============================================

What:  POST /applications (anonymous allowed), GET /applications (own),
       GET /applications/projects/{id} (admin), PATCH /applications/{id}.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.database import get_db_session
from junkick.models.user import User
from junkick.routes.deps import get_current_user, get_optional_user
from junkick.schemas.application import (
    ApplicationCreateRequest,
    ApplicationEnvelope,
    ApplicationListResponse,
    ApplicationStatusUpdateRequest,
)
from junkick.schemas.common import ErrorResponse
from junkick.services.application_service import application_service

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.post(
    "",
    response_model=ApplicationEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Apply to a project",
    description="Works with or without a token. Anonymous applications carry only a name.",
)
async def create_application(
    payload: ApplicationCreateRequest,
    caller: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationEnvelope:
    return ApplicationEnvelope(
        application=await application_service.create_application(db, payload, caller)
    )


@router.get(
    "",
    response_model=ApplicationListResponse,
    responses={401: {"description": "Not authenticated", "model": ErrorResponse}},
    summary="List the caller's applications",
)
async def list_own_applications(
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationListResponse:
    return await application_service.list_for_caller(db, caller)


@router.get(
    "/projects/{project_id}",
    response_model=ApplicationListResponse,
    responses={
        403: {"description": "Admin only", "model": ErrorResponse},
        404: {"description": "Project not found", "model": ErrorResponse},
    },
    summary="List a project's applications",
)
async def list_project_applications(
    project_id: str,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationListResponse:
    return await application_service.list_for_project(db, project_id, caller)


@router.patch(
    "/{application_id}",
    response_model=ApplicationEnvelope,
    responses={
        403: {"description": "Not the project owner", "model": ErrorResponse},
        404: {"description": "Application or project not found", "model": ErrorResponse},
    },
    summary="Change an application's status",
)
async def update_application_status(
    application_id: str,
    payload: ApplicationStatusUpdateRequest,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationEnvelope:
    return ApplicationEnvelope(
        application=await application_service.update_status(db, application_id, payload, caller)
    )
