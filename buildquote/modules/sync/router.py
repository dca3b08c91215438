"""Spreadsheet sync API router. Every route requires the ``X-Sync-Key`` header."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.database.session import get_db
from buildquote.dependencies import get_storage, require_sync_key
from buildquote.modules.storage.providers.base import StorageProviderBase
from buildquote.modules.sync.schemas import MaterialSyncResponse, SyncRequest, SyncResponse
from buildquote.modules.sync.service import SyncService
from buildquote.schemas.responses import ERROR_RESPONSES

router = APIRouter(
    prefix="/sync",
    tags=["sync"],
    dependencies=[Depends(require_sync_key)],
    responses=ERROR_RESPONSES,
)


@router.post("/rfqs", response_model=SyncResponse)
async def sync_rfqs(body: SyncRequest, db: AsyncSession = Depends(get_db)):
    """Replace the RFQ table with the spreadsheet's RFQ tab."""
    synced = await SyncService(db).sync_rfqs(body.data)
    return SyncResponse(message=f"{synced} RFQs synced successfully", synced=synced)


@router.post("/vendors", response_model=SyncResponse)
async def sync_vendors(body: SyncRequest, db: AsyncSession = Depends(get_db)):
    """Replace the vendor directory with the spreadsheet's vendor tab."""
    synced = await SyncService(db).sync_vendors(body.data)
    return SyncResponse(message=f"{synced} vendors synced successfully", synced=synced)


@router.post("/materials", response_model=MaterialSyncResponse)
async def sync_materials(
    body: SyncRequest,
    db: AsyncSession = Depends(get_db),
    storage: StorageProviderBase = Depends(get_storage),
):
    """Upsert catalog materials; embedded base64 images go to file storage."""
    result = await SyncService(db, storage=storage).sync_materials(body.data)
    return MaterialSyncResponse(
        message="Materials synced successfully",
        synced=result.upserted,
        images_stored=result.images_stored,
        images_failed=result.images_failed,
    )
