"""Pydantic v2 schemas for the spreadsheet sync endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SyncRequest(BaseModel):
    """Rows of one spreadsheet tab, keyed by column header."""

    data: list[dict] = Field(default_factory=list)


class SyncResponse(BaseModel):
    message: str
    synced: int


class MaterialSyncResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    synced: int
    images_stored: int = Field(0, alias="imagesStored")
    images_failed: int = Field(0, alias="imagesFailed")
