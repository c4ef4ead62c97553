"""
Junkick Backend — Project Models
==================================

What:  ORM models for `projects`, `project_tags` and `project_members`.
Why:   Projects are the resource every ownership rule protects.

Table Design:
    - owner_id: immutable after creation; the owner is always a member
    - legacy_owner_id: numeric owner id from the pre-migration snapshot, so
      owner listings can match rows written before ids were normalized
    - current_team: seat counter kept equal to the number of membership rows;
      the CHECK constraint backs the `current_team <= team_size` invariant
    - project_tags: one row per tech / needed-role tag. A row table (instead
      of an array column) keeps overlap filters plain indexed SQL on both
      PostgreSQL and SQLite
    - project_members: association rows; the composite primary key makes a
      duplicate membership impossible even under concurrent adds
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from junkick.database import Base
from junkick.enums import ProjectComplexity, ProjectStatus, TagKind
from junkick.models.user import User, enum_column, utcnow


project_members = Table(
    "project_members",
    Base.metadata,
    Column(
        "project_id",
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "user_id",
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("joined_at", DateTime(timezone=True), nullable=False, default=utcnow),
)


class ProjectTag(Base):
    """A single `tech` or `needed_role` value attached to a project."""

    __tablename__ = "project_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    kind: Mapped[TagKind] = mapped_column(enum_column(TagKind, 20), nullable=False)
    value: Mapped[str] = mapped_column(String(100), nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", "kind", "value", name="uq_project_tags_value"),
        Index("idx_project_tags_lookup", "kind", "value"),
    )


class Project(Base):
    """
    A project advertised on the marketplace.

    Lifecycle:
        Created by a team lead, client or admin (owner occupies the first
        seat); updated and deleted by the owner or an admin; membership only
        changes through the team add/remove operations.
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ProjectStatus] = mapped_column(
        enum_column(ProjectStatus), nullable=False, default=ProjectStatus.SEEKING_TEAM
    )
    looking_for: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(50), nullable=False)

    team_size: Mapped[int] = mapped_column(Integer, nullable=False)
    current_team: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    budget: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    timeline: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    complexity: Mapped[ProjectComplexity] = mapped_column(
        enum_column(ProjectComplexity), nullable=False, default=ProjectComplexity.MEDIUM
    )
    image: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    features: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    requirements: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id"), nullable=False
    )
    legacy_owner_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    # selectin: responses always render owner, members and tags; avoids
    # lazy loads, which async sessions cannot perform implicitly
    owner: Mapped[User] = relationship(User, lazy="selectin", foreign_keys=[owner_id])
    team_members: Mapped[List[User]] = relationship(
        User,
        secondary=project_members,
        lazy="selectin",
        order_by=project_members.c.joined_at,
    )
    tags: Mapped[List[ProjectTag]] = relationship(
        ProjectTag,
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=ProjectTag.id,
    )

    __table_args__ = (
        CheckConstraint("team_size BETWEEN 1 AND 50", name="ck_projects_team_size"),
        CheckConstraint(
            "current_team >= 1 AND current_team <= team_size",
            name="ck_projects_current_team",
        ),
        Index("idx_projects_owner_id", "owner_id"),
        Index("idx_projects_legacy_owner_id", "legacy_owner_id"),
        Index("idx_projects_category", "category"),
        Index("idx_projects_status", "status"),
        Index("idx_projects_created_at", created_at.desc()),
    )

    # ── Tag accessors ─────────────────────────────────────────────────────
    def _tag_values(self, kind: TagKind) -> List[str]:
        return [tag.value for tag in self.tags if tag.kind == kind]

    def set_tags(self, kind: TagKind, values: List[str]) -> None:
        """Replace every tag of `kind`, keeping first-seen order and dropping repeats."""
        # Existing rows are reused: the unit of work inserts before it deletes,
        # so re-adding a value as a new row would trip uq_project_tags_value
        existing = {tag.value: tag for tag in self.tags if tag.kind == kind}
        kept = [tag for tag in self.tags if tag.kind != kind]
        seen = set()
        for value in values:
            if value not in seen:
                seen.add(value)
                kept.append(existing.get(value) or ProjectTag(kind=kind, value=value))
        self.tags = kept

    @property
    def tech(self) -> List[str]:
        return self._tag_values(TagKind.TECH)

    @property
    def needed_roles(self) -> List[str]:
        return self._tag_values(TagKind.NEEDED_ROLE)

    @property
    def member_ids(self) -> List[uuid.UUID]:
        return [member.id for member in self.team_members]

    def __repr__(self) -> str:
        return (
            f"<Project(id={self.id}, name='{self.name}', "
            f"seats={self.current_team}/{self.team_size})>"
        )
