"""Initial schema

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

What:  Creates users, sessions, projects, project_tags, project_members,
       applications and the three dictionary tables.
How:   Portable types only (sa.Uuid, sa.JSON, VARCHAR enums), so the same
       revision runs against PostgreSQL and SQLite.

Seat invariants enforced by the database:
    - ck_projects_team_size:    1 <= team_size <= 50
    - ck_projects_current_team: 1 <= current_team <= team_size
    - project_members PK:       one membership row per (project, user)

Rollback: downgrade() drops every table (destructive, all data lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("legacy_id", sa.Integer(), nullable=True, unique=True,
                  comment="Numeric id from the pre-migration snapshot"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default="junior"),
        sa.Column("avatar", sa.String(500), nullable=True),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("experience", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("portfolio", sa.String(500), nullable=True),
        _timestamp("created_at"),
    )

    op.create_table(
        "sessions",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        _timestamp("created_at"),
    )
    op.create_index("idx_sessions_user_id", "sessions", ["user_id"])
    op.create_index("idx_sessions_created_at", "sessions", ["created_at"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="seeking-team"),
        sa.Column("looking_for", sa.String(500), nullable=False, server_default=""),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("team_size", sa.Integer(), nullable=False),
        sa.Column("current_team", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("budget", sa.String(100), nullable=False, server_default=""),
        sa.Column("timeline", sa.String(100), nullable=False, server_default=""),
        sa.Column("complexity", sa.String(20), nullable=False, server_default="medium"),
        sa.Column("image", sa.String(500), nullable=False, server_default=""),
        sa.Column("features", sa.JSON(), nullable=False),
        sa.Column("requirements", sa.JSON(), nullable=False),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("legacy_owner_id", sa.Integer(), nullable=True,
                  comment="Owner's numeric id on rows imported from the snapshot"),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("team_size BETWEEN 1 AND 50", name="ck_projects_team_size"),
        sa.CheckConstraint(
            "current_team >= 1 AND current_team <= team_size",
            name="ck_projects_current_team",
        ),
    )
    op.create_index("idx_projects_owner_id", "projects", ["owner_id"])
    op.create_index("idx_projects_legacy_owner_id", "projects", ["legacy_owner_id"])
    op.create_index("idx_projects_category", "projects", ["category"])
    op.create_index("idx_projects_status", "projects", ["status"])
    op.create_index("idx_projects_created_at", "projects", [sa.text("created_at DESC")])

    op.create_table(
        "project_tags",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("kind", sa.String(20), nullable=False),
        sa.Column("value", sa.String(100), nullable=False),
        sa.UniqueConstraint("project_id", "kind", "value", name="uq_project_tags_value"),
    )
    op.create_index("idx_project_tags_lookup", "project_tags", ["kind", "value"])

    op.create_table(
        "project_members",
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
        _timestamp("joined_at"),
    )

    op.create_table(
        "applications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="new"),
        _timestamp("created_at"),
    )
    op.create_index("idx_applications_project_id", "applications", ["project_id"])
    op.create_index("idx_applications_user_id", "applications", ["user_id"])

    op.create_table(
        "roles",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        sa.Column("variant", sa.String(20), nullable=True),
        sa.Column("color", sa.String(7), nullable=True),
    )
    op.create_table(
        "technologies",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("category", sa.String(50), nullable=False),
        sa.Column("icon", sa.String(100), nullable=True),
        sa.Column("color", sa.String(7), nullable=True),
    )
    op.create_table(
        "categories",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("description", sa.String(200), nullable=True),
        sa.Column("color", sa.String(7), nullable=True),
    )


def downgrade() -> None:
    for table in (
        "categories",
        "technologies",
        "roles",
        "applications",
        "project_members",
        "project_tags",
        "projects",
        "sessions",
        "users",
    ):
        op.drop_table(table)
