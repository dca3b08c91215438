"""Pydantic v2 schemas for catalog endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class MaterialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: uuid.UUID
    category: str
    item_name: str = Field(alias="itemName")
    size: str = ""
    unit: str = ""
    price: Decimal
    vendors: str | None = None
    image: str | None = None
    created_at: datetime | None = Field(None, alias="createdAt")


class MaterialListResponse(BaseModel):
    materials: list[MaterialResponse]
    total: int
    limit: int
    offset: int


class CategoryListResponse(BaseModel):
    categories: list[str]
