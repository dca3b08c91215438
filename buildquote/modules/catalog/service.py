"""Materials catalog read side."""

from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.models.material import Material

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_materials(
        self,
        category: str | None = None,
        search: str | None = None,
        limit: int = 500,
        offset: int = 0,
    ) -> tuple[list[Material], int]:
        """List materials with optional filters. Returns (items, total)."""
        query = select(Material)
        count_query = select(func.count()).select_from(Material)

        if category:
            category_filter = func.lower(Material.category) == category.strip().lower()
            query = query.where(category_filter)
            count_query = count_query.where(category_filter)
        if search:
            pattern = f"%{search.strip()}%"
            search_filter = or_(
                Material.item_name.ilike(pattern),
                Material.category.ilike(pattern),
                Material.size.ilike(pattern),
                Material.vendors.ilike(pattern),
            )
            query = query.where(search_filter)
            count_query = count_query.where(search_filter)

        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Material.category, Material.item_name, Material.size)
            .offset(offset)
            .limit(limit)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def list_categories(self) -> list[str]:
        result = await self.db.execute(
            select(Material.category).distinct().order_by(Material.category)
        )
        return [c for c in result.scalars().all() if c]
