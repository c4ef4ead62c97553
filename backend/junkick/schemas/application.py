"""
Junkick Backend — Application Schemas
=======================================

What:  Request bodies for creating applications and changing their status,
       and the populated application representation.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from junkick.enums import ApplicationStatus
from junkick.schemas.common import CamelModel, TrimmedStr
from junkick.schemas.project import ProjectSummary
from junkick.schemas.user import UserSummary


class ApplicationResponse(CamelModel):
    id: uuid.UUID
    project_id: uuid.UUID
    user_id: Optional[uuid.UUID] = None
    name: str
    role: str
    message: str
    status: ApplicationStatus
    created_at: datetime
    project: Optional[ProjectSummary] = None
    user: Optional[UserSummary] = None


class ApplicationEnvelope(CamelModel):
    application: ApplicationResponse


class ApplicationListResponse(CamelModel):
    applications: List[ApplicationResponse]


class ApplicationCreateRequest(CamelModel):
    """
    `name` is optional: authenticated callers are named from their profile,
    anonymous callers fall back to the configured anonymous label.
    """
    project_id: str = Field(min_length=1, description="Reference id of the target project")
    name: Optional[TrimmedStr] = Field(default=None, max_length=100)
    role: TrimmedStr = Field(min_length=1, max_length=50)
    message: TrimmedStr = Field(min_length=1, max_length=1000)


class ApplicationStatusUpdateRequest(CamelModel):
    status: ApplicationStatus
