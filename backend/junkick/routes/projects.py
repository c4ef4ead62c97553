"""
Junkick Backend — Project Route Handlers
==========================================

What:  Project CRUD, team membership and filtered listing under /projects.
How:   Extracts path/query/body input, resolves the caller, delegates to
       ProjectService. No business rule is checked here.

Route order matters: `/owner/{owner_id}` is declared before `/{project_id}`
so "owner" is never parsed as a project id.

Example:
    GET /api/projects?tech=react,go&neededRoles=designer&page=2&limit=10
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.database import get_db_session
from junkick.models.user import User
from junkick.routes.deps import get_current_user, get_optional_user
from junkick.schemas.common import ErrorResponse
from junkick.schemas.project import (
    ProjectCollection,
    ProjectCreateRequest,
    ProjectEnvelope,
    ProjectFilters,
    ProjectListResponse,
    ProjectUpdateRequest,
    TeamMemberRequest,
)
from junkick.services.project_service import project_service

router = APIRouter(prefix="/projects", tags=["Projects"])

_GATED_RESPONSES = {
    401: {"description": "Not authenticated", "model": ErrorResponse},
    403: {"description": "Not the project owner", "model": ErrorResponse},
    404: {"description": "Project not found", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ProjectListResponse,
    responses={400: {"description": "Invalid filter", "model": ErrorResponse}},
    summary="List projects with filters, sorting and pagination",
)
async def list_projects(
    filters: Annotated[ProjectFilters, Query()],
    response: Response,
    caller: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectListResponse:
    result = await project_service.list_projects(db, filters)
    response.headers["X-Total-Count"] = str(result.pagination.total)
    return result


@router.get(
    "/owner/{owner_id}",
    response_model=ProjectCollection,
    responses={400: {"description": "Malformed owner id", "model": ErrorResponse}},
    summary="List a user's projects (reference or legacy numeric id)",
)
async def list_projects_by_owner(
    owner_id: str,
    caller: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectCollection:
    return await project_service.list_projects_by_owner(db, owner_id)


@router.get(
    "/{project_id}",
    response_model=ProjectEnvelope,
    responses={404: {"description": "Project not found", "model": ErrorResponse}},
    summary="Get a single project",
)
async def get_project(
    project_id: str,
    caller: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    return ProjectEnvelope(project=await project_service.get_project(db, project_id))


@router.post(
    "",
    response_model=ProjectEnvelope,
    status_code=status.HTTP_201_CREATED,
    responses={
        401: {"description": "Not authenticated", "model": ErrorResponse},
        403: {"description": "Role cannot create projects", "model": ErrorResponse},
    },
    summary="Create a project",
)
async def create_project(
    payload: ProjectCreateRequest,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    return ProjectEnvelope(project=await project_service.create_project(db, payload, caller))


@router.patch(
    "/{project_id}",
    response_model=ProjectEnvelope,
    responses=_GATED_RESPONSES,
    summary="Update a project",
)
async def update_project(
    project_id: str,
    payload: ProjectUpdateRequest,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    return ProjectEnvelope(
        project=await project_service.update_project(db, project_id, payload, caller)
    )


@router.delete(
    "/{project_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=_GATED_RESPONSES,
    summary="Delete a project and its applications",
)
async def delete_project(
    project_id: str,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await project_service.delete_project(db, project_id, caller)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{project_id}/team",
    response_model=ProjectEnvelope,
    responses={
        **_GATED_RESPONSES,
        400: {"description": "Team is full", "model": ErrorResponse},
        409: {"description": "Already a member", "model": ErrorResponse},
    },
    summary="Add a team member",
)
async def add_team_member(
    project_id: str,
    payload: TeamMemberRequest,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    return ProjectEnvelope(
        project=await project_service.add_team_member(db, project_id, payload, caller)
    )


@router.delete(
    "/{project_id}/team/{user_id}",
    response_model=ProjectEnvelope,
    responses={
        **_GATED_RESPONSES,
        400: {"description": "Cannot remove the owner", "model": ErrorResponse},
    },
    summary="Remove a team member",
)
async def remove_team_member(
    project_id: str,
    user_id: str,
    caller: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ProjectEnvelope:
    return ProjectEnvelope(
        project=await project_service.remove_team_member(db, project_id, user_id, caller)
    )
