"""
Junkick Backend — ORM Models
==============================

Importing this package registers every table with `Base.metadata`
(used by Alembic autogenerate and `Database.create_all()`).

Model Inventory:
    - User, Session:              identity and login/logout audit trail
    - Project, ProjectTag,
      project_members:            projects, their tag rows and team seats
    - Application:                candidacy requests for a project
    - Role, Technology, Category: read-only reference dictionaries
"""

from junkick.models.user import User, Session
from junkick.models.project import Project, ProjectTag, project_members
from junkick.models.application import Application
from junkick.models.dictionary import Role, Technology, Category

__all__ = [
    "User",
    "Session",
    "Project",
    "ProjectTag",
    "project_members",
    "Application",
    "Role",
    "Technology",
    "Category",
]
