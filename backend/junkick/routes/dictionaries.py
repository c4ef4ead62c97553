"""
Junkick Backend — Dictionary Route Handlers
=============================================

What:  GET /roles, GET /technologies, GET /categories. Public, read-only.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from junkick.database import get_db_session
from junkick.schemas.dictionary import (
    CategoryListResponse,
    RoleListResponse,
    TechnologyListResponse,
)
from junkick.services.dictionary_service import dictionary_service

router = APIRouter(tags=["Dictionaries"])

# Reference data changes only on import
_CACHE_CONTROL = "public, max-age=300"


@router.get("/roles", response_model=RoleListResponse, summary="List roles")
async def list_roles(response: Response, db: AsyncSession = Depends(get_db_session)) -> RoleListResponse:
    response.headers["Cache-Control"] = _CACHE_CONTROL
    return await dictionary_service.list_roles(db)


@router.get("/technologies", response_model=TechnologyListResponse, summary="List technologies")
async def list_technologies(
    response: Response, db: AsyncSession = Depends(get_db_session)
) -> TechnologyListResponse:
    response.headers["Cache-Control"] = _CACHE_CONTROL
    return await dictionary_service.list_technologies(db)


@router.get("/categories", response_model=CategoryListResponse, summary="List categories")
async def list_categories(
    response: Response, db: AsyncSession = Depends(get_db_session)
) -> CategoryListResponse:
    response.headers["Cache-Control"] = _CACHE_CONTROL
    return await dictionary_service.list_categories(db)
