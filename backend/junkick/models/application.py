"""
Junkick Backend — Application Model
=====================================

What:  ORM model for the `applications` table (candidacy requests).

Table Design:
    - project_id: ON DELETE CASCADE; deleting a project removes its
      applications rather than leaving dangling references
    - user_id: nullable, anonymous applications carry only a display name;
      ON DELETE SET NULL keeps the application if the user row ever goes
    - status: flat state set, any-to-any transitions
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from junkick.database import Base
from junkick.enums import ApplicationStatus
from junkick.models.project import Project
from junkick.models.user import User, enum_column, utcnow


class Application(Base):
    """A request to join a project in a given role."""

    __tablename__ = "applications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    project_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[str] = mapped_column(String(50), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[ApplicationStatus] = mapped_column(
        enum_column(ApplicationStatus), nullable=False, default=ApplicationStatus.NEW
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    project: Mapped[Project] = relationship(Project, lazy="selectin")
    user: Mapped[Optional[User]] = relationship(User, lazy="selectin")

    __table_args__ = (
        Index("idx_applications_project_id", "project_id"),
        Index("idx_applications_user_id", "user_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Application(id={self.id}, project_id={self.project_id}, "
            f"status='{self.status.value}')>"
        )
