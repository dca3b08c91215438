"""RFQ distribution API router."""

from __future__ import annotations

import json
from dataclasses import asdict

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from buildquote.config import settings
from buildquote.database.session import get_db
from buildquote.dependencies import get_notifier, get_sheets, get_storage, get_tokens
from buildquote.exceptions import ValidationException
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.rfq.constants import ATTACHMENT_FIELD
from buildquote.modules.rfq.distribution_service import RfqDistributionService, project_summary
from buildquote.modules.rfq.schemas import (
    ProjectInfo,
    ProjectSummaryResponse,
    RfqCreateResponse,
    VendorItemsResponse,
)
from buildquote.modules.sheets.client import SheetsMirror
from buildquote.modules.storage.providers.base import StorageProviderBase, UploadedFile
from buildquote.modules.tokens.service import LinkTokenService
from buildquote.schemas.responses import ERROR_RESPONSES

router = APIRouter(prefix="/rfqs", tags=["rfqs"])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _decode_json_field(value: object, label: str) -> object:
    """Form fields carry JSON as strings; JSON bodies carry it inline."""
    if isinstance(value, str):
        try:
            return json.loads(value) if value.strip() else None
        except json.JSONDecodeError as exc:
            raise ValidationException(f"Invalid {label} JSON") from exc
    return value


def _parse_project(raw: object) -> ProjectInfo:
    raw = _decode_json_field(raw, "projectInfo")
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValidationException("projectInfo must be an object")
    try:
        return ProjectInfo.model_validate(raw)
    except ValidationError as exc:
        raise ValidationException("Invalid projectInfo") from exc


async def read_form(request: Request) -> FormData:
    """Parse a multipart or urlencoded body, capping the number of attachments."""
    try:
        return await request.form(max_files=settings.max_upload_files)
    except StarletteHTTPException as exc:
        raise ValidationException(str(exc.detail)) from exc


async def to_uploaded_file(upload: UploadFile) -> UploadedFile:
    return UploadedFile(
        filename=upload.filename or "file",
        content_type=upload.content_type or "application/octet-stream",
        content=await upload.read(),
    )


async def _read_create_payload(request: Request) -> tuple[ProjectInfo, object, list[UploadedFile]]:
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data") or content_type.startswith(
        "application/x-www-form-urlencoded"
    ):
        form = await read_form(request)
        files = [
            await to_uploaded_file(f)
            for f in form.getlist(ATTACHMENT_FIELD)
            if isinstance(f, UploadFile)
        ]
        return _parse_project(form.get("projectInfo")), form.get("items"), files

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationException("Request body must be JSON or multipart form data") from exc
    if not isinstance(body, dict):
        raise ValidationException("Request body must be an object")
    items = _decode_json_field(body.get("items"), "items")
    return _parse_project(body.get("projectInfo")), items, []


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("/", response_model=RfqCreateResponse, status_code=201, responses=ERROR_RESPONSES)
async def create_rfq(
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: LinkTokenService = Depends(get_tokens),
    notifier: NotificationService = Depends(get_notifier),
    storage: StorageProviderBase = Depends(get_storage),
    sheets: SheetsMirror = Depends(get_sheets),
):
    """Create an RFQ and email each assigned vendor its items.

    Accepts JSON (``projectInfo``, ``items``) or multipart form data with the
    same fields JSON-encoded plus ``files`` attachments.
    """
    project, items, files = await _read_create_payload(request)
    svc = RfqDistributionService(db, tokens=tokens, notifier=notifier, storage=storage, sheets=sheets)
    result = await svc.create_rfq(project, items, files)
    return RfqCreateResponse(
        rfq_id=result.rfq_id,
        folder_link=result.folder_link,
        file_links=result.file_links,
        emails_sent=result.emails_sent,
        emails_skipped=result.emails_skipped,
        emails_failed=result.emails_failed,
        sheet_updated=result.sheet_updated,
        award_email_sent=result.award_email_sent,
    )


@router.get(
    "/{rfq_id}/vendor-items/{token}",
    response_model=VendorItemsResponse,
    responses=ERROR_RESPONSES,
)
async def get_vendor_items(
    rfq_id: str,
    token: str,
    db: AsyncSession = Depends(get_db),
    tokens: LinkTokenService = Depends(get_tokens),
    notifier: NotificationService = Depends(get_notifier),
    storage: StorageProviderBase = Depends(get_storage),
    sheets: SheetsMirror = Depends(get_sheets),
):
    """Items the link's vendor was asked to quote, without other vendors' names."""
    svc = RfqDistributionService(db, tokens=tokens, notifier=notifier, storage=storage, sheets=sheets)
    view = await svc.get_vendor_items(rfq_id, token)
    return VendorItemsResponse(
        rfq_id=view.rfq.rfq_id,
        vendor_name=view.vendor_name,
        project=ProjectSummaryResponse(**asdict(project_summary(view.rfq))),
        items=[item.to_vendor_view() for item in view.items],
    )
