"""
Junkick Backend — Dictionary Schemas
======================================

Read-only reference rows returned by GET /roles, /technologies, /categories.
"""

from typing import List, Optional

from junkick.schemas.common import CamelModel


class RoleResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    variant: Optional[str] = None
    color: Optional[str] = None


class TechnologyResponse(CamelModel):
    id: str
    name: str
    category: str
    icon: Optional[str] = None
    color: Optional[str] = None


class CategoryResponse(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class RoleListResponse(CamelModel):
    roles: List[RoleResponse]


class TechnologyListResponse(CamelModel):
    technologies: List[TechnologyResponse]


class CategoryListResponse(CamelModel):
    categories: List[CategoryResponse]
