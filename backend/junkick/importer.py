"""
Junkick Backend — Snapshot Importer
=====================================

What:  Loads a legacy JSON snapshot (`db.json`) into the database.
Why:   The marketplace started on a flat JSON store with numeric ids and
       localized labels. Importing keeps old ids reachable (`users.legacy_id`,
       `projects.legacy_owner_id`) and normalizes every label to the enums.
How:   One transaction for the whole run. Entities are imported in
       dependency order (dictionaries → users → projects → applications);
       rows whose references cannot be resolved are skipped with a warning
       and counted in the ImportReport instead of aborting the run.

Usage:
    python -m junkick.importer path/to/db.json [--keep-existing]
                               [--database-url URL] [--create-tables]

Snapshot shape:
    {"users": [...], "projects": [...], "applications": [...],
     "roles": [...], "technologies": [...], "categories": [...]}
"""

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import aiofiles
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.config import settings
from junkick.database import Database
from junkick.enums import ApplicationStatus, ProjectComplexity, ProjectStatus, TagKind, UserRole
from junkick.models import (
    Application,
    Category,
    Project,
    ProjectTag,
    Role,
    Session,
    Technology,
    User,
    project_members,
)
from junkick.services.security import hash_password

logger = logging.getLogger(__name__)

MAX_TEAM_SIZE = 50

# ── Legacy label aliases ──────────────────────────────────────────────────
# The snapshot stores Russian UI labels; canonical values are accepted too.
ROLE_ALIASES = {
    "тимлид": UserRole.TEAM_LEAD,
    "заказчик": UserRole.CLIENT,
    "разработчик": UserRole.DEVELOPER,
    "дизайнер": UserRole.DESIGNER,
    "тестировщик": UserRole.TESTER,
    "джун": UserRole.JUNIOR,
}

PROJECT_STATUS_ALIASES = {
    "активный": ProjectStatus.ACTIVE,
    "завершен": ProjectStatus.COMPLETED,
    "приостановлен": ProjectStatus.PAUSED,
    "в поиске команды": ProjectStatus.SEEKING_TEAM,
}

COMPLEXITY_ALIASES = {
    "простой": ProjectComplexity.SIMPLE,
    "средний": ProjectComplexity.MEDIUM,
    "сложный": ProjectComplexity.COMPLEX,
}

APPLICATION_STATUS_ALIASES = {
    "рассматривается": ApplicationStatus.UNDER_REVIEW,
    "принято": ApplicationStatus.ACCEPTED,
    "отклонено": ApplicationStatus.REJECTED,
}


def normalize_label(value: Any, enum_cls, aliases: Dict[str, Any], default):
    """
    Map a canonical value or a legacy label to `enum_cls`.

    >>> normalize_label("тимлид", UserRole, ROLE_ALIASES, UserRole.JUNIOR)
    <UserRole.TEAM_LEAD: 'team-lead'>
    """
    if value is None or value == "":
        return default
    text = str(value).strip().lower()
    if text in aliases:
        return aliases[text]
    try:
        return enum_cls(text)
    except ValueError:
        logger.warning("Unknown %s label '%s', using '%s'", enum_cls.__name__, value, default.value)
        return default


def _as_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _legacy_int(value: Any) -> Optional[int]:
    text = str(value).strip() if value is not None else ""
    return int(text) if text.isdigit() else None


def _as_list(value: Any) -> List[str]:
    """Lists pass through; comma-separated strings are split."""
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return [str(item).strip() for item in value if str(item).strip()]


def _key(value: Any) -> str:
    return str(value).strip()


@dataclass
class ImportReport:
    roles: int = 0
    technologies: int = 0
    categories: int = 0
    users: int = 0
    projects: int = 0
    applications: int = 0
    skipped: List[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"users={self.users} projects={self.projects} "
            f"applications={self.applications} roles={self.roles} "
            f"technologies={self.technologies} categories={self.categories} "
            f"skipped={len(self.skipped)}"
        )


class SnapshotImporter:
    """
    Imports one snapshot into a Database.

    Args:
        database:         Target persistence client.
        keep_existing:    Append instead of clearing every table first.
        default_password: Password for snapshot users that have none.
    """

    def __init__(
        self,
        database: Database,
        keep_existing: bool = False,
        default_password: Optional[str] = None,
    ):
        self.database = database
        self.keep_existing = keep_existing
        self.default_password = default_password or settings.default_import_password

    async def run(self, snapshot: Dict[str, Any]) -> ImportReport:
        report = ImportReport()
        async with self.database.session() as db:
            if not self.keep_existing:
                await self._clear(db)
            await self._import_dictionaries(db, snapshot, report)
            users = await self._import_users(db, snapshot.get("users") or [], report)
            projects = await self._import_projects(db, snapshot.get("projects") or [], users, report)
            self._import_applications(db, snapshot.get("applications") or [], projects, users, report)
            await db.flush()

        logger.info("Import finished: %s", report.summary())
        return report

    async def _clear(self, db: AsyncSession) -> None:
        for target in (Application, project_members, ProjectTag, Project, Session, User, Role, Technology, Category):
            await db.execute(delete(target))
        logger.info("Existing data cleared")

    async def _import_dictionaries(self, db: AsyncSession, snapshot: Dict[str, Any], report: ImportReport) -> None:
        for row in snapshot.get("roles") or []:
            db.add(Role(
                id=_key(row["id"]),
                name=row["name"],
                description=row.get("description"),
                variant=row.get("variant"),
                color=row.get("color"),
            ))
            report.roles += 1
        for row in snapshot.get("technologies") or []:
            db.add(Technology(
                id=_key(row["id"]),
                name=row["name"],
                category=row.get("category") or "other",
                icon=row.get("icon"),
                color=row.get("color"),
            ))
            report.technologies += 1
        for row in snapshot.get("categories") or []:
            db.add(Category(
                id=_key(row["id"]),
                name=row["name"],
                description=row.get("description"),
                color=row.get("color"),
            ))
            report.categories += 1
        await db.flush()

    async def _import_users(
        self, db: AsyncSession, rows: Iterable[Dict[str, Any]], report: ImportReport
    ) -> Dict[str, User]:
        users: Dict[str, User] = {}
        seen_emails = set()
        for row in rows:
            email = str(row.get("email") or "").strip().lower()
            if not email or email in seen_emails:
                self._skip(report, f"user {row.get('id')}: missing or duplicate email")
                continue
            seen_emails.add(email)

            user = User(
                legacy_id=_legacy_int(row.get("id")),
                name=str(row.get("name") or email).strip(),
                email=email,
                password_hash=await hash_password(row.get("password") or self.default_password),
                role=normalize_label(row.get("role"), UserRole, ROLE_ALIASES, UserRole.DEVELOPER),
                avatar=row.get("avatar"),
                skills=_as_list(row.get("skills")),
                bio=row.get("bio"),
                experience=max(0, _as_int(row.get("experience"))),
                location=row.get("location"),
                portfolio=row.get("portfolio"),
            )
            db.add(user)
            users[_key(row.get("id"))] = user
            report.users += 1
        await db.flush()
        return users

    async def _import_projects(
        self,
        db: AsyncSession,
        rows: Iterable[Dict[str, Any]],
        users: Dict[str, User],
        report: ImportReport,
    ) -> Dict[str, Project]:
        projects: Dict[str, Project] = {}
        for row in rows:
            owner = users.get(_key(row.get("ownerId")))
            if owner is None:
                self._skip(report, f"project '{row.get('name')}': owner {row.get('ownerId')} not found")
                continue

            members = [owner]
            for member_id in row.get("teamMembers") or []:
                member = users.get(_key(member_id))
                if member is not None and member not in members:
                    members.append(member)
            if len(members) > MAX_TEAM_SIZE:
                logger.warning(
                    "Project '%s' lists %d members, keeping the first %d",
                    row.get("name"), len(members), MAX_TEAM_SIZE,
                )
                members = members[:MAX_TEAM_SIZE]

            team_size = min(MAX_TEAM_SIZE, max(_as_int(row.get("teamSize"), 1), len(members), 1))

            project = Project(
                name=str(row.get("name") or "Untitled").strip(),
                description=str(row.get("description") or "").strip(),
                status=normalize_label(
                    row.get("status"), ProjectStatus, PROJECT_STATUS_ALIASES, ProjectStatus.SEEKING_TEAM
                ),
                looking_for=row.get("lookingFor") or "",
                category=row.get("category") or "other",
                team_size=team_size,
                current_team=len(members),
                budget=row.get("budget") or "",
                timeline=row.get("timeline") or "",
                complexity=normalize_label(
                    row.get("complexity"), ProjectComplexity, COMPLEXITY_ALIASES, ProjectComplexity.MEDIUM
                ),
                image=row.get("image") or "",
                features=_as_list(row.get("features")),
                requirements=_as_list(row.get("requirements")),
                owner_id=owner.id,
                legacy_owner_id=_legacy_int(row.get("ownerId")),
            )
            project.owner = owner
            project.team_members = members
            project.set_tags(TagKind.TECH, _as_list(row.get("tech")))
            project.set_tags(TagKind.NEEDED_ROLE, _as_list(row.get("neededRoles")))
            db.add(project)
            projects[_key(row.get("id"))] = project
            report.projects += 1
        await db.flush()
        return projects

    def _import_applications(
        self,
        db: AsyncSession,
        rows: Iterable[Dict[str, Any]],
        projects: Dict[str, Project],
        users: Dict[str, User],
        report: ImportReport,
    ) -> None:
        for row in rows:
            project = projects.get(_key(row.get("projectId")))
            if project is None:
                self._skip(report, f"application {row.get('id')}: project {row.get('projectId')} not found")
                continue

            user = users.get(_key(row.get("userId"))) if row.get("userId") is not None else None
            db.add(Application(
                project_id=project.id,
                user_id=user.id if user else None,
                name=str(row.get("name") or settings.anonymous_applicant_name).strip(),
                role=str(row.get("role") or "").strip(),
                message=str(row.get("message") or "").strip(),
                status=normalize_label(
                    row.get("status"), ApplicationStatus, APPLICATION_STATUS_ALIASES, ApplicationStatus.NEW
                ),
            ))
            report.applications += 1

    @staticmethod
    def _skip(report: ImportReport, reason: str) -> None:
        logger.warning("Skipped %s", reason)
        report.skipped.append(reason)


async def load_snapshot(path: str) -> Dict[str, Any]:
    async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
        return json.loads(await f.read())


async def import_snapshot(
    path: str,
    database_url: Optional[str] = None,
    keep_existing: bool = False,
    create_tables: bool = False,
) -> ImportReport:
    database = Database(database_url or settings.database_url)
    try:
        if create_tables:
            await database.create_all()
        snapshot = await load_snapshot(path)
        return await SnapshotImporter(database, keep_existing=keep_existing).run(snapshot)
    finally:
        await database.dispose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m junkick.importer",
        description="Import a legacy db.json snapshot.",
    )
    parser.add_argument("path", help="Path to the JSON snapshot")
    parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Append to existing data instead of clearing every table first",
    )
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (local SQLite bootstrap; use Alembic elsewhere)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    from junkick.main import setup_logging

    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        report = asyncio.run(
            import_snapshot(
                args.path,
                database_url=args.database_url,
                keep_existing=args.keep_existing,
                create_tables=args.create_tables,
            )
        )
    except FileNotFoundError:
        logger.error("Snapshot file not found: %s", args.path)
        return 1
    except json.JSONDecodeError as e:
        logger.error("Snapshot is not valid JSON: %s", e)
        return 1

    print(report.summary())
    return 0


if __name__ == "__main__":
    sys.exit(main())
