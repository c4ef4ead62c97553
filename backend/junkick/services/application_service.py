"""
Junkick Backend — Application Service (Application Lifecycle Manager)
=======================================================================

What:  Create applications, list them per project or per caller, and let the
       project owner move them between statuses.
Why:   Applications may be anonymous, so identity is optional on create and
       the applicant name has to be resolved here, not in the route.

Status Transitions:
    new ⇄ under-review ⇄ accepted ⇄ rejected
    Any-to-any. Accepting an application does not add the applicant to the
    team; the owner does that explicitly through the team endpoints.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.config import settings
from junkick.enums import ApplicationStatus
from junkick.exceptions import NotFoundError
from junkick.models.application import Application
from junkick.models.project import Project
from junkick.models.user import User
from junkick.schemas.application import (
    ApplicationCreateRequest,
    ApplicationListResponse,
    ApplicationResponse,
    ApplicationStatusUpdateRequest,
)
from junkick.services.access_control import Action, authorize, require
from junkick.services.identifiers import parse_reference

logger = logging.getLogger(__name__)


class ApplicationService:
    """Business logic for applications. Stateless apart from the bypass flag."""

    def __init__(self, admin_bypass: Optional[bool] = None):
        self._admin_bypass = admin_bypass

    @property
    def admin_bypass(self) -> bool:
        if self._admin_bypass is None:
            return settings.admin_bypass_ownership
        return self._admin_bypass

    def _authorize(self, action: Action, caller: Optional[User], owner_id=None) -> None:
        decision = authorize(
            action,
            caller.id if caller else None,
            caller.role if caller else None,
            resource_owner_id=owner_id,
            admin_bypass=self.admin_bypass,
        )
        if not decision.allowed:
            logger.warning(
                "Denied %s for caller %s: %s",
                action.value, caller.id if caller else None, decision.code,
            )
        require(decision)

    async def create_application(
        self,
        db: AsyncSession,
        payload: ApplicationCreateRequest,
        caller: Optional[User],
    ) -> ApplicationResponse:
        """
        Submit an application to a project.

        Authenticated callers are recorded by id and profile name (any name in
        the payload is ignored); anonymous callers keep the supplied name or
        the configured anonymous label. Status always starts at `new`.

        Raises:
            InvalidReferenceError: Malformed project id
            NotFoundError: PROJECT_NOT_FOUND
        """
        self._authorize(Action.CREATE_APPLICATION, caller)

        project_id = parse_reference(payload.project_id, "project")
        project = await db.get(Project, project_id)
        if project is None:
            raise NotFoundError(resource="project", resource_id=str(project_id))

        if caller is not None:
            name = caller.name
        else:
            name = payload.name or settings.anonymous_applicant_name

        application = Application(
            project_id=project.id,
            user_id=caller.id if caller else None,
            name=name,
            role=payload.role,
            message=payload.message,
            status=ApplicationStatus.NEW,
        )
        application.project = project
        application.user = caller
        db.add(application)
        await db.flush()

        logger.info(
            "Application %s created for project %s (%s)",
            application.id, project.id, "user " + str(caller.id) if caller else "anonymous",
        )
        return ApplicationResponse.model_validate(application)

    async def list_for_project(
        self,
        db: AsyncSession,
        project_id: str,
        caller: Optional[User],
    ) -> ApplicationListResponse:
        """
        All applications of one project, newest first. Admin only.

        The permission check runs before the existence check, so non-admins
        cannot discover which project ids exist.
        """
        self._authorize(Action.LIST_PROJECT_APPLICATIONS, caller)

        project_uuid = parse_reference(project_id, "project")
        if await db.get(Project, project_uuid) is None:
            raise NotFoundError(resource="project", resource_id=str(project_uuid))

        result = await db.execute(
            select(Application)
            .where(Application.project_id == project_uuid)
            .order_by(Application.created_at.desc())
        )
        return ApplicationListResponse(
            applications=[ApplicationResponse.model_validate(a) for a in result.scalars().all()]
        )

    async def list_for_caller(
        self,
        db: AsyncSession,
        caller: Optional[User],
    ) -> ApplicationListResponse:
        """The caller's own applications, newest first, with project summaries."""
        self._authorize(Action.LIST_OWN_APPLICATIONS, caller)

        result = await db.execute(
            select(Application)
            .where(Application.user_id == caller.id)
            .order_by(Application.created_at.desc())
        )
        return ApplicationListResponse(
            applications=[ApplicationResponse.model_validate(a) for a in result.scalars().all()]
        )

    async def update_status(
        self,
        db: AsyncSession,
        application_id: str,
        payload: ApplicationStatusUpdateRequest,
        caller: Optional[User],
    ) -> ApplicationResponse:
        """
        Move an application to another status.

        Raises:
            NotFoundError: APPLICATION_NOT_FOUND, PROJECT_NOT_FOUND
            AccessDeniedError: APPLICATION_ACCESS_DENIED for non-owners
        """
        app_id = parse_reference(application_id, "application")
        application = await db.get(Application, app_id)
        if application is None:
            raise NotFoundError(resource="application", resource_id=str(app_id))

        project = application.project
        if project is None:
            raise NotFoundError(resource="project", resource_id=str(application.project_id))

        self._authorize(Action.UPDATE_APPLICATION_STATUS, caller, project.owner_id)

        previous = application.status
        application.status = payload.status
        await db.flush()

        logger.info(
            "Application %s status %s -> %s by %s",
            application.id, previous.value, payload.status.value, caller.id,
        )
        return ApplicationResponse.model_validate(application)


# ── Singleton Instance ────────────────────────────────────────────────────
application_service = ApplicationService()
