"""
Junkick Backend — Identifier Resolution
=========================================

What:  Parses raw path/query identifiers into typed ids.
Why:   Two id shapes exist in stored data: UUID reference ids, and numeric
       legacy ids from the pre-migration snapshot. Resolution happens here,
       at the data-access boundary, so services only ever see UUIDs and an
       explicit `OwnerRef`.
"""

import uuid
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from junkick.exceptions import InvalidReferenceError
from junkick.models.project import Project
from junkick.models.user import User


@dataclass(frozen=True)
class LegacyNumericId:
    value: int


@dataclass(frozen=True)
class ReferenceId:
    value: uuid.UUID


RawId = Union[LegacyNumericId, ReferenceId]


def parse_reference(value: str, resource: str = "resource") -> uuid.UUID:
    """
    Parse a reference id or raise INVALID_ID.

    >>> parse_reference("7c9e6679-7425-40de-944b-e07fc1f90ae7", "project")
    UUID('7c9e6679-7425-40de-944b-e07fc1f90ae7')
    """
    try:
        return uuid.UUID(str(value).strip())
    except (ValueError, AttributeError):
        raise InvalidReferenceError(str(value), resource)


def classify(value: str, resource: str = "resource") -> RawId:
    """Tell a legacy numeric id from a reference id."""
    text = str(value).strip()
    if text.isdigit():
        return LegacyNumericId(int(text))
    return ReferenceId(parse_reference(text, resource))


@dataclass(frozen=True)
class OwnerRef:
    """
    Canonical owner identity: the reference id (when the user exists) plus
    the legacy id still stored on pre-migration project rows.
    """

    reference_id: Optional[uuid.UUID]
    legacy_id: Optional[int]

    def project_filter(self) -> Optional[ColumnElement]:
        """`owner_id = :ref OR legacy_owner_id = :legacy`, None if nothing can match."""
        clauses = []
        if self.reference_id is not None:
            clauses.append(Project.owner_id == self.reference_id)
        if self.legacy_id is not None:
            clauses.append(Project.legacy_owner_id == self.legacy_id)
        if not clauses:
            return None
        return or_(*clauses)


async def resolve_owner_ref(db: AsyncSession, value: str) -> OwnerRef:
    """
    Normalize an owner identifier of either shape.

    A legacy id is looked up to find the user's reference id; a reference id
    is looked up to find the user's legacy id. Either half may stay None
    (unknown user, or a user created after the migration).
    """
    raw = classify(value, "user")
    if isinstance(raw, LegacyNumericId):
        result = await db.execute(select(User.id).where(User.legacy_id == raw.value))
        return OwnerRef(reference_id=result.scalar_one_or_none(), legacy_id=raw.value)

    result = await db.execute(select(User.legacy_id).where(User.id == raw.value))
    return OwnerRef(reference_id=raw.value, legacy_id=result.scalar_one_or_none())
