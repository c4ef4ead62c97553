"""
Junkick Backend — Dictionary Service
======================================

Read-only listings of the reference data (roles, technologies, categories)
the frontend uses to render filters and badges.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.models.dictionary import Category, Role, Technology
from junkick.schemas.dictionary import (
    CategoryListResponse,
    CategoryResponse,
    RoleListResponse,
    RoleResponse,
    TechnologyListResponse,
    TechnologyResponse,
)


class DictionaryService:

    async def list_roles(self, db: AsyncSession) -> RoleListResponse:
        result = await db.execute(select(Role).order_by(Role.name))
        return RoleListResponse(
            roles=[RoleResponse.model_validate(r) for r in result.scalars().all()]
        )

    async def list_technologies(self, db: AsyncSession) -> TechnologyListResponse:
        result = await db.execute(
            select(Technology).order_by(Technology.category, Technology.name)
        )
        return TechnologyListResponse(
            technologies=[TechnologyResponse.model_validate(t) for t in result.scalars().all()]
        )

    async def list_categories(self, db: AsyncSession) -> CategoryListResponse:
        result = await db.execute(select(Category).order_by(Category.name))
        return CategoryListResponse(
            categories=[CategoryResponse.model_validate(c) for c in result.scalars().all()]
        )


dictionary_service = DictionaryService()
