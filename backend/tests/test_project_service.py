"""
Junkick Backend — Project Service Tests
=========================================

What:  Seat bookkeeping, ownership checks, update rules, deletion cascade and
       listing filters of ProjectService, against a real SQLite database.

What we test:
    ✅ Create puts the owner in the first seat regardless of payload
    ✅ Add/remove keep current_team == len(team_members) <= team_size
    ✅ Capacity holds when this session's copy of the project is stale
    ✅ Duplicate add, owner removal, non-member removal are rejected unchanged
    ✅ Non-owners are denied every gated action; admin bypass both ways
    ✅ Listing filters, relevance, sorting and pagination
"""

import uuid

import pytest
from sqlalchemy import func, select

from junkick.enums import ApplicationStatus, ProjectStatus, UserRole
from junkick.exceptions import (
    AccessDeniedError,
    AuthenticationRequiredError,
    CapacityExceededError,
    ConflictError,
    InvalidReferenceError,
    NotFoundError,
    TeamRuleError,
    ValidationError,
)
from junkick.models.application import Application
from junkick.models.project import Project, project_members
from junkick.models.user import User
from junkick.schemas.project import (
    ProjectCreateRequest,
    ProjectFilters,
    ProjectUpdateRequest,
    TeamMemberRequest,
)
from junkick.services.project_service import ProjectService


def project_payload(**overrides) -> ProjectCreateRequest:
    data = {
        "name": "Realtime chat",
        "description": "A websocket chat for small teams",
        "category": "web",
        "tech": ["react", "go"],
        "needed_roles": ["designer"],
        "team_size": 5,
    }
    data.update(overrides)
    return ProjectCreateRequest(**data)


def member(user: User) -> TeamMemberRequest:
    return TeamMemberRequest(user_id=str(user.id))


async def seat_count(database, project_id):
    async with database.session() as session:
        project = await session.get(Project, project_id)
        members = (await session.execute(
            select(func.count()).select_from(project_members).where(
                project_members.c.project_id == project_id
            )
        )).scalar()
        return project.current_team, members


class TestCreateProject:

    def setup_method(self):
        self.service = ProjectService()

    @pytest.mark.asyncio
    async def test_owner_takes_first_seat(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)

        project = await self.service.create_project(db_session, project_payload(), owner)

        assert project.current_team == 1
        assert project.owner_id == owner.id
        assert [m.id for m in project.team_members] == [owner.id]
        assert project.tech == ["react", "go"]
        assert project.needed_roles == ["designer"]
        assert project.status is ProjectStatus.SEEKING_TEAM

    @pytest.mark.asyncio
    async def test_duplicate_tags_collapse(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.CLIENT)
        project = await self.service.create_project(
            db_session, project_payload(tech=["react", " react ", "go"]), owner
        )
        assert project.tech == ["react", "go"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("role", [UserRole.DEVELOPER, UserRole.JUNIOR, UserRole.DESIGNER])
    async def test_non_creator_role_denied(self, db_session, make_user, role):
        user = await make_user(db_session, role=role)
        with pytest.raises(AccessDeniedError) as exc_info:
            await self.service.create_project(db_session, project_payload(), user)
        assert exc_info.value.code == "PROJECT_CREATION_DENIED"

    @pytest.mark.asyncio
    async def test_anonymous_denied(self, db_session):
        with pytest.raises(AuthenticationRequiredError):
            await self.service.create_project(db_session, project_payload(), None)


class TestTeamMembership:

    def setup_method(self):
        self.service = ProjectService()

    @pytest.mark.asyncio
    async def test_add_then_remove(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        dev = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(team_size=5), owner)

        added = await self.service.add_team_member(db_session, str(created.id), member(dev), owner)
        assert added.current_team == 2
        assert {m.id for m in added.team_members} == {owner.id, dev.id}

        removed = await self.service.remove_team_member(
            db_session, str(created.id), str(dev.id), owner
        )
        assert removed.current_team == 1
        assert [m.id for m in removed.team_members] == [owner.id]

    @pytest.mark.asyncio
    async def test_single_seat_project_is_full(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        dev = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(team_size=1), owner)

        with pytest.raises(CapacityExceededError) as exc_info:
            await self.service.add_team_member(db_session, str(created.id), member(dev), owner)
        assert exc_info.value.code == "TEAM_SIZE_EXCEEDED"
        assert exc_info.value.details == {"teamSize": 1}

    @pytest.mark.asyncio
    async def test_fill_to_capacity(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        devs = [await make_user(db_session) for _ in range(3)]
        created = await self.service.create_project(db_session, project_payload(team_size=3), owner)

        await self.service.add_team_member(db_session, str(created.id), member(devs[0]), owner)
        full = await self.service.add_team_member(db_session, str(created.id), member(devs[1]), owner)
        assert full.current_team == full.team_size == 3

        with pytest.raises(CapacityExceededError):
            await self.service.add_team_member(db_session, str(created.id), member(devs[2]), owner)

    @pytest.mark.asyncio
    async def test_stale_read_cannot_overfill(self, database, db_session, make_user):
        """
        This session still holds the project at 1/2 seats while another
        session takes the last seat; the conditional update must refuse.
        """
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        first = await make_user(db_session)
        second = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(team_size=2), owner)
        await db_session.commit()

        stale = await db_session.get(Project, created.id)
        assert stale.current_team == 1

        async with database.session() as other:
            other_owner = await other.get(User, owner.id)
            await self.service.add_team_member(other, str(created.id), member(first), other_owner)

        with pytest.raises(CapacityExceededError):
            await self.service.add_team_member(db_session, str(created.id), member(second), owner)
        await db_session.rollback()

        assert await seat_count(database, created.id) == (2, 2)

    @pytest.mark.asyncio
    async def test_duplicate_member_rejected(self, database, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        dev = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(), owner)
        await self.service.add_team_member(db_session, str(created.id), member(dev), owner)
        await db_session.commit()

        with pytest.raises(ConflictError) as exc_info:
            await self.service.add_team_member(db_session, str(created.id), member(dev), owner)
        assert exc_info.value.code == "USER_ALREADY_MEMBER"
        assert exc_info.value.status_code == 409
        await db_session.rollback()

        assert await seat_count(database, created.id) == (2, 2)

    @pytest.mark.asyncio
    async def test_owner_cannot_be_added_again(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        created = await self.service.create_project(db_session, project_payload(), owner)
        with pytest.raises(ConflictError):
            await self.service.add_team_member(db_session, str(created.id), member(owner), owner)

    @pytest.mark.asyncio
    async def test_cannot_remove_owner(self, database, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        created = await self.service.create_project(db_session, project_payload(), owner)
        await db_session.commit()

        with pytest.raises(TeamRuleError) as exc_info:
            await self.service.remove_team_member(db_session, str(created.id), str(owner.id), owner)
        assert exc_info.value.code == "CANNOT_REMOVE_OWNER"
        assert exc_info.value.status_code == 400

        assert await seat_count(database, created.id) == (1, 1)

    @pytest.mark.asyncio
    async def test_remove_non_member(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        outsider = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(), owner)

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.remove_team_member(db_session, str(created.id), str(outsider.id), owner)
        assert exc_info.value.code == "USER_NOT_MEMBER"

    @pytest.mark.asyncio
    async def test_add_unknown_user(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        created = await self.service.create_project(db_session, project_payload(), owner)
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.add_team_member(
                db_session, str(created.id), TeamMemberRequest(user_id=str(uuid.uuid4())), owner
            )
        assert exc_info.value.code == "USER_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_non_owner_cannot_change_team(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        stranger = await make_user(db_session, role=UserRole.TEAM_LEAD)
        dev = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(), owner)

        with pytest.raises(AccessDeniedError) as exc_info:
            await self.service.add_team_member(db_session, str(created.id), member(dev), stranger)
        assert exc_info.value.code == "PROJECT_ACCESS_DENIED"

        with pytest.raises(AccessDeniedError):
            await self.service.remove_team_member(db_session, str(created.id), str(owner.id), stranger)

    @pytest.mark.asyncio
    async def test_admin_bypass_toggle(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        admin = await make_user(db_session, role=UserRole.ADMIN)
        dev = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(), owner)

        strict = ProjectService(admin_bypass=False)
        with pytest.raises(AccessDeniedError):
            await strict.add_team_member(db_session, str(created.id), member(dev), admin)

        lenient = ProjectService(admin_bypass=True)
        result = await lenient.add_team_member(db_session, str(created.id), member(dev), admin)
        assert result.current_team == 2


class TestUpdateAndDelete:

    def setup_method(self):
        self.service = ProjectService()

    @pytest.mark.asyncio
    async def test_partial_update(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        created = await self.service.create_project(db_session, project_payload(), owner)

        updated = await self.service.update_project(
            db_session,
            str(created.id),
            ProjectUpdateRequest(name="Renamed", tech=["go", "rust"], status=ProjectStatus.ACTIVE),
            owner,
        )
        assert updated.name == "Renamed"
        assert updated.tech == ["go", "rust"]
        assert updated.status is ProjectStatus.ACTIVE
        assert updated.description == created.description
        assert updated.current_team == 1
        assert updated.owner_id == owner.id

    @pytest.mark.asyncio
    async def test_seat_fields_ignored(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        created = await self.service.create_project(db_session, project_payload(), owner)

        payload = ProjectUpdateRequest.model_validate(
            {"description": "Updated", "currentTeam": 4, "ownerId": str(uuid.uuid4())}
        )
        updated = await self.service.update_project(db_session, str(created.id), payload, owner)
        assert updated.description == "Updated"
        assert updated.current_team == 1
        assert updated.owner_id == owner.id

    @pytest.mark.asyncio
    async def test_team_size_below_members_rejected(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        devs = [await make_user(db_session) for _ in range(2)]
        created = await self.service.create_project(db_session, project_payload(team_size=5), owner)
        for dev in devs:
            await self.service.add_team_member(db_session, str(created.id), member(dev), owner)

        with pytest.raises(ValidationError) as exc_info:
            await self.service.update_project(
                db_session, str(created.id), ProjectUpdateRequest(team_size=2), owner
            )
        assert exc_info.value.code == "VALIDATION_ERROR"

        exact = await self.service.update_project(
            db_session, str(created.id), ProjectUpdateRequest(team_size=3), owner
        )
        assert exact.team_size == 3

    @pytest.mark.asyncio
    async def test_non_owner_update_denied(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        stranger = await make_user(db_session, role=UserRole.CLIENT)
        created = await self.service.create_project(db_session, project_payload(), owner)

        with pytest.raises(AccessDeniedError) as exc_info:
            await self.service.update_project(
                db_session, str(created.id), ProjectUpdateRequest(name="Hijacked"), stranger
            )
        assert exc_info.value.code == "PROJECT_ACCESS_DENIED"

        current = await self.service.get_project(db_session, str(created.id))
        assert current.name == created.name

    @pytest.mark.asyncio
    async def test_non_owner_delete_denied(self, database, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        stranger = await make_user(db_session, role=UserRole.TEAM_LEAD)
        created = await self.service.create_project(db_session, project_payload(), owner)
        await db_session.commit()

        with pytest.raises(AccessDeniedError) as exc_info:
            await self.service.delete_project(db_session, str(created.id), stranger)
        assert exc_info.value.code == "PROJECT_ACCESS_DENIED"
        await db_session.rollback()

        async with database.session() as check:
            assert await check.get(Project, created.id) is not None

    @pytest.mark.parametrize("field", ["name", "description", "category"])
    def test_blank_required_text_rejected(self, field):
        with pytest.raises(ValueError):
            project_payload(**{field: "   "})

    def test_text_fields_trimmed(self):
        payload = project_payload(name="  Realtime chat  ", budget=" $500 ")
        assert payload.name == "Realtime chat"
        assert payload.budget == "$500"

    @pytest.mark.asyncio
    async def test_missing_project(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        with pytest.raises(NotFoundError) as exc_info:
            await self.service.update_project(
                db_session, str(uuid.uuid4()), ProjectUpdateRequest(name="x"), owner
            )
        assert exc_info.value.code == "PROJECT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_malformed_id(self, db_session):
        with pytest.raises(InvalidReferenceError):
            await self.service.get_project(db_session, "not-an-id")

    @pytest.mark.asyncio
    async def test_delete_cascades_to_applications(self, database, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        dev = await make_user(db_session)
        created = await self.service.create_project(db_session, project_payload(), owner)
        await self.service.add_team_member(db_session, str(created.id), member(dev), owner)
        db_session.add(Application(
            project_id=created.id, name="Anonymous", role="designer",
            message="Hi", status=ApplicationStatus.NEW,
        ))
        await db_session.commit()

        await self.service.delete_project(db_session, str(created.id), owner)
        await db_session.commit()

        async with database.session() as check:
            assert await check.get(Project, created.id) is None
            remaining = (await check.execute(
                select(func.count(Application.id)).where(Application.project_id == created.id)
            )).scalar()
            assert remaining == 0
            memberships = (await check.execute(
                select(func.count()).select_from(project_members)
            )).scalar()
            assert memberships == 0


class TestListProjects:

    def setup_method(self):
        self.service = ProjectService()

    async def _seed(self, db_session, owner):
        specs = [
            ("Chat app", "Realtime messaging", ["react", "go"], ["designer"], "web"),
            ("Game engine", "Tiny engine for chat bots", ["rust"], ["developer"], "games"),
            ("Todo", "Simple todo list", ["vue"], ["tester"], "web"),
            ("Chat bot", "Bot framework", ["go"], ["developer", "designer"], "ai"),
        ]
        for name, description, tech, roles, category in specs:
            await self.service.create_project(
                db_session,
                project_payload(
                    name=name, description=description, tech=tech,
                    needed_roles=roles, category=category,
                ),
                owner,
            )

    @pytest.mark.asyncio
    async def test_tech_overlap(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        await self._seed(db_session, owner)

        result = await self.service.list_projects(db_session, ProjectFilters(tech="react,go"))
        assert {p.name for p in result.projects} == {"Chat app", "Chat bot"}
        assert result.pagination.total == 2

    @pytest.mark.asyncio
    async def test_combined_filters(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        await self._seed(db_session, owner)

        result = await self.service.list_projects(
            db_session, ProjectFilters(needed_roles="designer", category="ai")
        )
        assert [p.name for p in result.projects] == ["Chat bot"]

    @pytest.mark.asyncio
    async def test_text_search_ranks_name_hits_first(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        await self._seed(db_session, owner)

        result = await self.service.list_projects(db_session, ProjectFilters(q="chat"))
        names = [p.name for p in result.projects]
        assert set(names) == {"Chat app", "Chat bot", "Game engine"}
        # Name matches (score 10) rank above the description-only match (5)
        assert names[-1] == "Game engine"

    @pytest.mark.asyncio
    async def test_sort_by_name_and_paginate(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD)
        await self._seed(db_session, owner)

        page1 = await self.service.list_projects(db_session, ProjectFilters(sort="name", limit=3))
        page2 = await self.service.list_projects(db_session, ProjectFilters(sort="name", limit=3, page=2))

        assert [p.name for p in page1.projects] == ["Chat app", "Chat bot", "Game engine"]
        assert [p.name for p in page2.projects] == ["Todo"]
        assert page1.pagination.pages == 2
        assert page1.pagination.total == 4

    @pytest.mark.asyncio
    async def test_owner_listing_accepts_legacy_id(self, db_session, make_user):
        owner = await make_user(db_session, role=UserRole.TEAM_LEAD, legacy_id=3)
        other = await make_user(db_session, role=UserRole.CLIENT)
        await self.service.create_project(db_session, project_payload(name="Mine"), owner)
        await self.service.create_project(db_session, project_payload(name="Theirs"), other)
        # A pre-migration row whose only owner link is the numeric id
        db_session.add(Project(
            name="Imported", description="Legacy row", category="web", team_size=2,
            current_team=1, owner_id=other.id, legacy_owner_id=3,
            owner=other, team_members=[], tags=[],
        ))
        await db_session.flush()

        by_legacy = await self.service.list_projects_by_owner(db_session, "3")
        by_reference = await self.service.list_projects_by_owner(db_session, str(owner.id))

        assert {p.name for p in by_legacy.projects} == {"Mine", "Imported"}
        assert {p.name for p in by_reference.projects} == {"Mine", "Imported"}

    def test_invalid_sort_rejected(self):
        with pytest.raises(ValueError):
            ProjectFilters(sort="budget")
