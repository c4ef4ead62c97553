"""
Junkick Backend — Project Service (Project Mutation Engine)
=============================================================

What:  Create, read, list, update and delete projects, and change their team.
Why:   Every seat-bookkeeping rule lives here: the owner always holds a seat,
       `current_team` always equals the number of members, and never exceeds
       `team_size`. Routes only translate HTTP to calls on this service.
How:   Each operation loads what it needs, asks the access-control evaluator
       for a decision, validates, and only then writes. Everything runs
       inside the request's session, so a rejected operation leaves no trace.

Capacity Guard (AddTeamMember):
    ┌──────────────┐   ┌───────────────────────────────────────┐   ┌────────────┐
    │ load project │──▶│ UPDATE projects                       │──▶│ INSERT     │
    │ authorize    │   │   SET current_team = current_team + 1 │   │ membership │
    │ resolve user │   │ WHERE id = :id                        │   │ (PK guard) │
    └──────────────┘   │   AND current_team < team_size        │   └────────────┘
                       └───────────────────────────────────────┘
                         rowcount 0 → TEAM_SIZE_EXCEEDED

    The condition is evaluated by the database against the committed row,
    not against the copy this session loaded, so two concurrent adds racing
    for the last seat cannot both succeed. A duplicate membership row fails
    the composite primary key and the whole transaction rolls back,
    increment included.
"""

import logging
import math
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import case, delete, false, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.config import settings
from junkick.enums import TagKind
from junkick.exceptions import (
    CapacityExceededError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    TeamRuleError,
    ValidationError,
)
from junkick.models.application import Application
from junkick.models.project import Project, ProjectTag, project_members
from junkick.models.user import User, utcnow
from junkick.schemas.common import Pagination
from junkick.schemas.project import (
    ProjectCollection,
    ProjectCreateRequest,
    ProjectFilters,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdateRequest,
    TeamMemberRequest,
)
from junkick.services.access_control import Action, authorize, require
from junkick.services.identifiers import parse_reference, resolve_owner_ref

logger = logging.getLogger(__name__)

# Never writable through create/update payloads
PROTECTED_FIELDS = ("id", "owner_id", "created_at", "updated_at", "current_team", "team_members")

# Relevance weights for free-text search
NAME_WEIGHT = 10
DESCRIPTION_WEIGHT = 5

SORT_COLUMNS = {
    "createdAt": Project.created_at.asc(),
    "-createdAt": Project.created_at.desc(),
    "name": Project.name.asc(),
    "-name": Project.name.desc(),
}


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _caller_identity(caller: Optional[User]):
    if caller is None:
        return None, None
    return caller.id, caller.role


class ProjectService:
    """
    Business logic for projects and their teams.

    Args:
        admin_bypass: Whether admins pass ownership checks. Defaults to the
                      ADMIN_BYPASS_OWNERSHIP setting.
    """

    def __init__(self, admin_bypass: Optional[bool] = None):
        self._admin_bypass = admin_bypass

    @property
    def admin_bypass(self) -> bool:
        if self._admin_bypass is None:
            return settings.admin_bypass_ownership
        return self._admin_bypass

    def _authorize(self, action: Action, caller: Optional[User], owner_id=None) -> None:
        caller_id, caller_role = _caller_identity(caller)
        decision = authorize(
            action,
            caller_id,
            caller_role,
            resource_owner_id=owner_id,
            admin_bypass=self.admin_bypass,
        )
        if not decision.allowed:
            logger.warning(
                "Denied %s for caller %s: %s", action.value, caller_id, decision.code
            )
        require(decision)

    # ── Loading ───────────────────────────────────────────────────────────
    async def _load(self, db: AsyncSession, project_id: uuid.UUID, fresh: bool = False) -> Project:
        query = select(Project).where(Project.id == project_id)
        if fresh:
            # Re-read columns and relationships after core UPDATE/INSERT statements
            query = query.execution_options(populate_existing=True)
        result = await db.execute(query)
        project = result.scalar_one_or_none()
        if project is None:
            raise NotFoundError(resource="project", resource_id=str(project_id))
        return project

    async def get_project(self, db: AsyncSession, project_id: str) -> ProjectResponse:
        """
        Fetch one project with owner and members populated.

        Raises:
            InvalidReferenceError: Malformed id (→ 400 INVALID_ID)
            NotFoundError: PROJECT_NOT_FOUND (→ 404)
        """
        project = await self._load(db, parse_reference(project_id, "project"))
        return ProjectResponse.model_validate(project)

    # ── Create / Update / Delete ──────────────────────────────────────────
    async def create_project(
        self,
        db: AsyncSession,
        payload: ProjectCreateRequest,
        caller: Optional[User],
    ) -> ProjectResponse:
        """
        Create a project owned by the caller, who occupies the first seat.

        Raises:
            AuthenticationRequiredError: No caller
            AccessDeniedError: PROJECT_CREATION_DENIED for non-creator roles
        """
        self._authorize(Action.CREATE_PROJECT, caller)

        data = payload.model_dump(exclude={"tech", "needed_roles"})
        for key in PROTECTED_FIELDS:
            data.pop(key, None)

        project = Project(
            **data,
            owner_id=caller.id,
            current_team=1,
        )
        project.owner = caller
        project.team_members = [caller]
        project.set_tags(TagKind.TECH, payload.tech)
        project.set_tags(TagKind.NEEDED_ROLE, payload.needed_roles)
        db.add(project)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Failed to create project: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the project. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Project %s created by %s (team_size=%d)", project.id, caller.id, project.team_size)
        return ProjectResponse.model_validate(project)

    async def update_project(
        self,
        db: AsyncSession,
        project_id: str,
        payload: ProjectUpdateRequest,
        caller: Optional[User],
    ) -> ProjectResponse:
        """
        Apply a partial update. Seat bookkeeping fields are never touched.

        Raises:
            NotFoundError: PROJECT_NOT_FOUND
            AccessDeniedError: PROJECT_ACCESS_DENIED for non-owners
            ValidationError: team_size lowered below the current member count
        """
        project = await self._load(db, parse_reference(project_id, "project"))
        self._authorize(Action.UPDATE_PROJECT, caller, project.owner_id)

        # Explicit nulls on non-nullable columns are treated as "not sent"
        data: Dict[str, Any] = {
            key: value
            for key, value in payload.model_dump(exclude_unset=True).items()
            if value is not None
        }
        for key in PROTECTED_FIELDS:
            data.pop(key, None)

        new_size = data.get("team_size")
        if new_size is not None and new_size < project.current_team:
            raise ValidationError(
                message=(
                    f"teamSize cannot be lower than the current team "
                    f"({project.current_team} members)"
                ),
                field="teamSize",
            )

        tech = data.pop("tech", None)
        needed_roles = data.pop("needed_roles", None)
        for key, value in data.items():
            setattr(project, key, value)
        if tech is not None:
            project.set_tags(TagKind.TECH, tech)
        if needed_roles is not None:
            project.set_tags(TagKind.NEEDED_ROLE, needed_roles)
        project.updated_at = utcnow()

        try:
            await db.flush()
        except IntegrityError:
            # ck_projects_current_team: a member joined after the check above
            raise ValidationError(
                message="teamSize cannot be lower than the current team",
                field="teamSize",
            )

        logger.info("Project %s updated by %s: %s", project.id, caller.id, sorted(data))
        return ProjectResponse.model_validate(project)

    async def delete_project(
        self,
        db: AsyncSession,
        project_id: str,
        caller: Optional[User],
    ) -> None:
        """Hard delete; applications, tags and memberships go with it."""
        project = await self._load(db, parse_reference(project_id, "project"))
        self._authorize(Action.DELETE_PROJECT, caller, project.owner_id)

        removed = await db.execute(
            delete(Application).where(Application.project_id == project.id)
        )
        await db.delete(project)
        await db.flush()
        logger.info(
            "Project %s deleted by %s (%d applications removed)",
            project.id, caller.id, removed.rowcount,
        )

    # ── Team ──────────────────────────────────────────────────────────────
    async def add_team_member(
        self,
        db: AsyncSession,
        project_id: str,
        payload: TeamMemberRequest,
        caller: Optional[User],
    ) -> ProjectResponse:
        """
        Add a user to the team if a seat is free.

        Raises:
            NotFoundError: PROJECT_NOT_FOUND, USER_NOT_FOUND
            AccessDeniedError: PROJECT_ACCESS_DENIED
            ConflictError: USER_ALREADY_MEMBER (→ 409)
            CapacityExceededError: TEAM_SIZE_EXCEEDED (→ 400)
        """
        project = await self._load(db, parse_reference(project_id, "project"))
        self._authorize(Action.ADD_TEAM_MEMBER, caller, project.owner_id)

        user_id = parse_reference(payload.user_id, "user")
        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))

        if user.id in project.member_ids:
            raise ConflictError(
                message="User is already a member of this team",
                code="USER_ALREADY_MEMBER",
            )

        result = await db.execute(
            update(Project)
            .where(Project.id == project.id, Project.current_team < Project.team_size)
            .values(current_team=Project.current_team + 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            logger.info("Project %s is full, rejected member %s", project.id, user.id)
            raise CapacityExceededError(team_size=project.team_size)

        try:
            await db.execute(
                insert(project_members).values(
                    project_id=project.id, user_id=user.id, joined_at=utcnow()
                )
            )
        except IntegrityError:
            # Another request added the same user between our read and insert
            raise ConflictError(
                message="User is already a member of this team",
                code="USER_ALREADY_MEMBER",
            )

        project = await self._load(db, project.id, fresh=True)
        logger.info(
            "User %s joined project %s (%d/%d)",
            user.id, project.id, project.current_team, project.team_size,
        )
        return ProjectResponse.model_validate(project)

    async def remove_team_member(
        self,
        db: AsyncSession,
        project_id: str,
        user_id: str,
        caller: Optional[User],
    ) -> ProjectResponse:
        """
        Remove a member and free their seat. The owner cannot be removed.

        Raises:
            NotFoundError: PROJECT_NOT_FOUND, USER_NOT_MEMBER
            AccessDeniedError: PROJECT_ACCESS_DENIED
            TeamRuleError: CANNOT_REMOVE_OWNER
        """
        project = await self._load(db, parse_reference(project_id, "project"))
        self._authorize(Action.REMOVE_TEAM_MEMBER, caller, project.owner_id)

        member_id = parse_reference(user_id, "user")
        if member_id == project.owner_id:
            raise TeamRuleError(message="The project owner cannot be removed from the team")

        result = await db.execute(
            delete(project_members).where(
                project_members.c.project_id == project.id,
                project_members.c.user_id == member_id,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError(
                resource="user",
                resource_id=str(member_id),
                code="USER_NOT_MEMBER",
                message="User is not a member of this team",
            )

        await db.execute(
            update(Project)
            .where(Project.id == project.id, Project.current_team > 1)
            .values(current_team=Project.current_team - 1, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )

        project = await self._load(db, project.id, fresh=True)
        logger.info(
            "User %s left project %s (%d/%d)",
            member_id, project.id, project.current_team, project.team_size,
        )
        return ProjectResponse.model_validate(project)

    # ── Listing ───────────────────────────────────────────────────────────
    async def list_projects(self, db: AsyncSession, filters: ProjectFilters) -> ProjectListResponse:
        """
        Filtered, sorted, paginated listing.

        Filters combine with AND. `tech` / `needed_roles` match projects
        holding at least one of the given values. With `q`, each whitespace
        separated term is matched case-insensitively against name and
        description; rows matching no term are dropped and the rest are
        ranked by name hits × 10 + description hits × 5 before the
        requested sort.

        Query plan (tech filter):
            SELECT ... FROM projects
            WHERE id IN (SELECT project_id FROM project_tags
                         WHERE kind = 'tech' AND value IN (:v1, :v2))
            → idx_project_tags_lookup
        """
        conditions: List[Any] = []

        if filters.category:
            conditions.append(Project.category == filters.category)
        if filters.status:
            conditions.append(Project.status == filters.status)
        if filters.owner_id:
            owner_filter = (await resolve_owner_ref(db, filters.owner_id)).project_filter()
            conditions.append(owner_filter if owner_filter is not None else false())
        for kind, values in ((TagKind.TECH, filters.tech), (TagKind.NEEDED_ROLE, filters.needed_roles)):
            if values:
                conditions.append(
                    Project.id.in_(
                        select(ProjectTag.project_id).where(
                            ProjectTag.kind == kind, ProjectTag.value.in_(values)
                        )
                    )
                )

        score = None
        terms = filters.q.split() if filters.q else []
        if terms:
            term_matches = []
            score_parts = []
            for term in terms:
                pattern = _like_pattern(term)
                in_name = Project.name.ilike(pattern, escape="\\")
                in_description = Project.description.ilike(pattern, escape="\\")
                term_matches.extend([in_name, in_description])
                score_parts.append(case((in_name, NAME_WEIGHT), else_=0))
                score_parts.append(case((in_description, DESCRIPTION_WEIGHT), else_=0))
            conditions.append(or_(*term_matches))
            score = sum(score_parts[1:], score_parts[0])

        limit = min(filters.limit, settings.max_page_size)
        offset = (filters.page - 1) * limit

        try:
            count_query = select(func.count(Project.id)).where(*conditions)
            total = (await db.execute(count_query)).scalar() or 0

            query = select(Project).where(*conditions)
            if score is not None:
                query = query.order_by(score.desc())
            query = query.order_by(SORT_COLUMNS[filters.sort], Project.id)
            query = query.offset(offset).limit(limit)
            projects = list((await db.execute(query)).scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing projects: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve projects. Please try again.",
                context={"error_type": type(e).__name__},
            )

        return ProjectListResponse(
            projects=[ProjectResponse.model_validate(p) for p in projects],
            pagination=Pagination(
                page=filters.page,
                limit=limit,
                total=total,
                pages=math.ceil(total / limit) if total else 0,
            ),
        )

    async def list_projects_by_owner(self, db: AsyncSession, owner_id: str) -> ProjectCollection:
        """
        Projects owned by a user, newest first.

        `owner_id` may be a reference id or a legacy numeric id; rows written
        before the migration are matched through `legacy_owner_id`.
        """
        owner_filter = (await resolve_owner_ref(db, owner_id)).project_filter()
        if owner_filter is None:
            return ProjectCollection(projects=[])

        result = await db.execute(
            select(Project).where(owner_filter).order_by(Project.created_at.desc())
        )
        return ProjectCollection(
            projects=[ProjectResponse.model_validate(p) for p in result.scalars().all()]
        )


# ── Singleton Instance ────────────────────────────────────────────────────
project_service = ProjectService()
