"""
Junkick Backend — User and Auth Schemas
=========================================

What:  Request bodies for registration, login and profile updates, and the
       user representations returned by the API.
Why:   The password hash never leaves the server: no response model has a
       field for it.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from junkick.enums import SELF_ASSIGNABLE_ROLES, UserRole
from junkick.schemas.common import CamelModel, TrimmedStr


def _split_skills(value):
    """Accept either a list or a comma-separated string (the legacy UI sends one)."""
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class UserSummary(CamelModel):
    """Compact user reference embedded in projects and applications."""
    id: uuid.UUID
    name: str
    email: str
    avatar: Optional[str] = None


class UserResponse(CamelModel):
    """Full profile (without credentials)."""
    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    bio: Optional[str] = None
    experience: int = 0
    location: Optional[str] = None
    portfolio: Optional[str] = None
    legacy_id: Optional[int] = None
    created_at: datetime


class UserEnvelope(CamelModel):
    user: UserResponse


class AuthResponse(CamelModel):
    """Returned by register and login."""
    user: UserResponse
    access_token: str
    token_type: str = "Bearer"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(CamelModel):
    name: TrimmedStr = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    role: UserRole = UserRole.JUNIOR
    avatar: Optional[TrimmedStr] = Field(default=None, max_length=500)
    skills: List[str] = Field(default_factory=list)
    bio: Optional[TrimmedStr] = Field(default=None, max_length=1000)
    experience: int = Field(default=0, ge=0, le=50)
    location: Optional[TrimmedStr] = Field(default=None, max_length=100)
    portfolio: Optional[TrimmedStr] = Field(default=None, max_length=500)

    @field_validator("skills", mode="before")
    @classmethod
    def normalize_skills(cls, v):
        return _split_skills(v)

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: UserRole) -> UserRole:
        """Admin accounts are never self-registered."""
        if v not in SELF_ASSIGNABLE_ROLES:
            raise ValueError(f"Role '{v.value}' cannot be chosen at registration")
        return v


class UserUpdateRequest(CamelModel):
    """
    Partial profile update. Only fields the client actually sent are applied
    (`model_dump(exclude_unset=True)`); email and credentials are not
    updatable here.
    """
    name: Optional[TrimmedStr] = Field(default=None, min_length=1, max_length=100)
    avatar: Optional[TrimmedStr] = Field(default=None, max_length=500)
    skills: Optional[List[str]] = None
    bio: Optional[TrimmedStr] = Field(default=None, max_length=1000)
    experience: Optional[int] = Field(default=None, ge=0, le=50)
    location: Optional[TrimmedStr] = Field(default=None, max_length=100)
    portfolio: Optional[TrimmedStr] = Field(default=None, max_length=500)
    role: Optional[UserRole] = None

    @field_validator("skills", mode="before")
    @classmethod
    def normalize_skills(cls, v):
        return _split_skills(v)
