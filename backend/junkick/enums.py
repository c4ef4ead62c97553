"""
Junkick Backend — Closed Enumerations
=======================================

What:  The fixed value sets shared by models, schemas and the access-control
       evaluator.
Why:   Roles double as authorization keys. Keeping them a closed `str` enum
       means the evaluator matches on members instead of raw strings, and a
       new role is a visible change in one place.
How:   `str` mixin so members compare equal to their wire value and store as
       plain strings in the database.

This module imports nothing from the web or persistence layers.
"""

import enum


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    TEAM_LEAD = "team-lead"
    CLIENT = "client"
    DEVELOPER = "developer"
    DESIGNER = "designer"
    TESTER = "tester"
    JUNIOR = "junior"


# Roles allowed to advertise projects (admin is included explicitly)
PROJECT_CREATOR_ROLES = frozenset({UserRole.TEAM_LEAD, UserRole.CLIENT, UserRole.ADMIN})

# Roles a user may pick for themselves at registration
SELF_ASSIGNABLE_ROLES = frozenset(role for role in UserRole if role is not UserRole.ADMIN)


class ProjectStatus(str, enum.Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"
    SEEKING_TEAM = "seeking-team"


class ProjectComplexity(str, enum.Enum):
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"


class ApplicationStatus(str, enum.Enum):
    NEW = "new"
    UNDER_REVIEW = "under-review"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class SessionEvent(str, enum.Enum):
    LOGIN = "login"
    LOGOUT = "logout"


class TagKind(str, enum.Enum):
    """Which list a project tag row belongs to."""

    TECH = "tech"
    NEEDED_ROLE = "needed_role"
