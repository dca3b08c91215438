"""Materials catalog API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.database.session import get_db
from buildquote.modules.catalog.schemas import (
    CategoryListResponse,
    MaterialListResponse,
    MaterialResponse,
)
from buildquote.modules.catalog.service import CatalogService

router = APIRouter(prefix="/materials", tags=["materials"])


@router.get("/", response_model=MaterialListResponse)
async def list_materials(
    category: str | None = Query(None, max_length=255),
    search: str | None = Query(None, max_length=255),
    limit: int = Query(500, ge=1, le=2000),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List catalog materials, optionally filtered by category or free text."""
    svc = CatalogService(db)
    items, total = await svc.list_materials(
        category=category, search=search, limit=limit, offset=offset
    )
    return MaterialListResponse(
        materials=[MaterialResponse.model_validate(m) for m in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(db: AsyncSession = Depends(get_db)):
    svc = CatalogService(db)
    return CategoryListResponse(categories=await svc.list_categories())
