"""
Junkick Backend — Project Schemas
===================================

What:  Request bodies for project create/update/team changes, listing query
       parameters, and the populated project representation.
Why:   Seat bookkeeping (`ownerId`, `currentTeam`, `teamMembers`) is not part
       of any request model, so a client can never set it directly; the
       service additionally drops those keys if they slip through.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from junkick.config import settings
from junkick.enums import ProjectComplexity, ProjectStatus
from junkick.schemas.common import CamelModel, Pagination, TrimmedStr
from junkick.schemas.user import UserSummary


def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """'react, go,,' -> ['react', 'go']; empty input -> None."""
    if value is None:
        return None
    parts = [part.strip() for part in value.split(",") if part.strip()]
    return parts or None


def _clean_tags(values: List[str]) -> List[str]:
    cleaned = [item.strip() for item in values if item and item.strip()]
    if not cleaned:
        raise ValueError("must contain at least one non-empty value")
    if any(len(item) > 100 for item in cleaned):
        raise ValueError("values must be at most 100 characters")
    return cleaned


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class ProjectResponse(CamelModel):
    """
    Populated project: owner and members are embedded user summaries.

    `owner_id` mirrors `owner.id` so list consumers can match ownership
    without reading the nested object.
    """
    id: uuid.UUID
    name: str
    description: str
    status: ProjectStatus
    looking_for: str
    category: str
    tech: List[str]
    needed_roles: List[str]
    team_size: int
    current_team: int
    budget: str
    timeline: str
    complexity: ProjectComplexity
    image: str
    features: List[str]
    requirements: List[str]
    owner_id: uuid.UUID
    owner: UserSummary
    team_members: List[UserSummary]
    created_at: datetime
    updated_at: datetime


class ProjectEnvelope(CamelModel):
    project: ProjectResponse


class ProjectListResponse(CamelModel):
    projects: List[ProjectResponse]
    pagination: Pagination


class ProjectSummary(CamelModel):
    """Compact project reference embedded in applications."""
    id: uuid.UUID
    name: str
    description: str
    status: ProjectStatus
    category: str
    owner_id: uuid.UUID


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class ProjectCreateRequest(CamelModel):
    name: TrimmedStr = Field(min_length=1, max_length=200)
    description: TrimmedStr = Field(min_length=1, max_length=2000)
    status: ProjectStatus = ProjectStatus.SEEKING_TEAM
    looking_for: TrimmedStr = Field(default="", max_length=500)
    category: TrimmedStr = Field(min_length=1, max_length=50)
    tech: List[str] = Field(min_length=1, description="At least one technology")
    needed_roles: List[str] = Field(min_length=1, description="At least one role")
    team_size: int = Field(ge=1, le=50)
    budget: TrimmedStr = Field(default="", max_length=100)
    timeline: TrimmedStr = Field(default="", max_length=100)
    complexity: ProjectComplexity = ProjectComplexity.MEDIUM
    image: TrimmedStr = Field(default="", max_length=500)
    features: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)

    @field_validator("tech", "needed_roles")
    @classmethod
    def validate_tags(cls, v: List[str]) -> List[str]:
        return _clean_tags(v)

    @field_validator("features", "requirements")
    @classmethod
    def validate_items(cls, v: List[str]) -> List[str]:
        if any(len(item) > 200 for item in v):
            raise ValueError("items must be at most 200 characters")
        return v


class ProjectUpdateRequest(CamelModel):
    """Every create field, all optional. Applied with exclude_unset."""
    name: Optional[TrimmedStr] = Field(default=None, min_length=1, max_length=200)
    description: Optional[TrimmedStr] = Field(default=None, min_length=1, max_length=2000)
    status: Optional[ProjectStatus] = None
    looking_for: Optional[TrimmedStr] = Field(default=None, max_length=500)
    category: Optional[TrimmedStr] = Field(default=None, min_length=1, max_length=50)
    tech: Optional[List[str]] = Field(default=None, min_length=1)
    needed_roles: Optional[List[str]] = Field(default=None, min_length=1)
    team_size: Optional[int] = Field(default=None, ge=1, le=50)
    budget: Optional[TrimmedStr] = Field(default=None, max_length=100)
    timeline: Optional[TrimmedStr] = Field(default=None, max_length=100)
    complexity: Optional[ProjectComplexity] = None
    image: Optional[TrimmedStr] = Field(default=None, max_length=500)
    features: Optional[List[str]] = None
    requirements: Optional[List[str]] = None

    @field_validator("tech", "needed_roles")
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return _clean_tags(v)


class TeamMemberRequest(CamelModel):
    user_id: str = Field(min_length=1, description="Reference id of the user to add")


class ProjectFilters(CamelModel):
    """
    Validated query parameters for GET /projects.

    `needed_roles` and `tech` arrive as comma-separated strings and match
    projects holding at least one of the listed values.
    """
    q: Optional[str] = Field(default=None, max_length=200)
    category: Optional[str] = None
    status: Optional[ProjectStatus] = None
    owner_id: Optional[str] = None
    needed_roles: Optional[List[str]] = None
    tech: Optional[List[str]] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=settings.default_page_size, ge=1, le=100)
    sort: str = Field(default="-createdAt")

    @field_validator("needed_roles", "tech", mode="before")
    @classmethod
    def split_csv(cls, v):
        # ?tech=react,go and ?tech=react&tech=go are equivalent
        if isinstance(v, str):
            return _split_csv(v)
        if isinstance(v, (list, tuple)):
            return _split_csv(",".join(str(item) for item in v))
        return v

    @field_validator("sort")
    @classmethod
    def validate_sort(cls, v: str) -> str:
        valid = {"createdAt", "-createdAt", "name", "-name"}
        if v not in valid:
            raise ValueError(f"Invalid sort '{v}'. Must be one of: {sorted(valid)}")
        return v


class ProjectCollection(CamelModel):
    """Unpaginated project list (owner listings)."""
    projects: List[ProjectResponse]
