"""
Junkick Backend — User and Session Models
===========================================

What:  ORM models for the `users` and `sessions` tables.
Why:   Users are the callers every authorization decision is made for;
       sessions are the append-only login/logout audit trail.

Table Design:
    - UUID primary key: the reference id used by the API and by tokens
    - legacy_id: numeric id carried over from the pre-migration snapshot,
      kept so old links (/projects/owner/42) still resolve
    - email: unique, stored lowercased
    - skills: JSON list (never filtered on in SQL)
    - sessions: insert-only, never updated or deleted
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from junkick.database import Base
from junkick.enums import SessionEvent, UserRole


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def enum_column(enum_cls, length: int = 20) -> Enum:
    """Store enum members by value in a plain VARCHAR (portable across backends)."""
    return Enum(
        enum_cls,
        native_enum=False,
        length=length,
        values_callable=lambda members: [m.value for m in members],
        validate_strings=True,
    )


class User(Base):
    """
    A registered marketplace user.

    Lifecycle:
        Created at registration (or by the snapshot importer); profile fields
        mutated by the user or an admin; never hard-deleted.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    legacy_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, unique=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole), nullable=False, default=UserRole.JUNIOR
    )

    avatar: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    skills: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    experience: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    location: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    portfolio: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role.value}')>"


class Session(Base):
    """One login or logout event. Append-only."""

    __tablename__ = "sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[SessionEvent] = mapped_column(enum_column(SessionEvent, 10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("idx_sessions_user_id", "user_id"),
        Index("idx_sessions_created_at", "created_at"),
    )
