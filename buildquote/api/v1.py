"""Centralized v1 API router — all module routers are included here."""

from fastapi import APIRouter

from buildquote.modules.award.router import router as award_router
from buildquote.modules.catalog.router import router as catalog_router
from buildquote.modules.rfq.router import router as rfq_router
from buildquote.modules.sync.router import router as sync_router
from buildquote.modules.vendor.router import router as vendor_router
from buildquote.modules.vendor_reply.router import router as vendor_reply_router

v1_router = APIRouter(prefix="/api/v1")
v1_router.include_router(catalog_router)
v1_router.include_router(vendor_router)
v1_router.include_router(rfq_router)
v1_router.include_router(vendor_reply_router)
v1_router.include_router(award_router)
v1_router.include_router(sync_router)
