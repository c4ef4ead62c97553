"""
Junkick Backend — Shared Schema Building Blocks
=================================================

What:  The camelCase base model, error envelope, pagination block and health
       response used across every resource.
Why:   Clients speak camelCase (`teamSize`, `ownerId`); Python code speaks
       snake_case. The alias generator bridges the two in one place and
       `populate_by_name` lets either spelling through on input.
"""

from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Leading and trailing whitespace is removed before any length check, so
# "   " fails min_length=1. Passwords are never declared with this type.
TrimmedStr = Annotated[str, StringConstraints(strip_whitespace=True)]


# ══════════════════════════════════════════════════════════════════════════
# Error Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorBody(CamelModel):
    """
    Fields:
        message: Human-readable description for display to users
        code: Stable machine-readable code (e.g. "PROJECT_NOT_FOUND")
        details: Optional extra context (field errors, limits)
        request_id: Correlation ID for tracing this error in server logs
    """
    message: str = Field(description="Human-readable error description")
    code: str = Field(description="Stable machine-readable error code")
    details: Optional[Any] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class ErrorResponse(BaseModel):
    """
    Standardized error envelope for every API error.

    Example:
        {
            "error": {
                "message": "The team has already reached its maximum size",
                "code": "TEAM_SIZE_EXCEEDED",
                "details": {"teamSize": 4},
                "requestId": "a1b2c3d4"
            }
        }
    """
    error: ErrorBody


# ══════════════════════════════════════════════════════════════════════════
# Pagination
# ══════════════════════════════════════════════════════════════════════════


class Pagination(CamelModel):
    page: int = Field(description="1-based page number")
    limit: int = Field(description="Page size")
    total: int = Field(description="Total number of matching items")
    pages: int = Field(description="Total number of pages")


class HealthResponse(CamelModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
