"""Vendor reply intake API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from buildquote.database.session import get_db
from buildquote.dependencies import get_notifier, get_sheets, get_storage, get_tokens
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.rfq.constants import REPLY_FILE_FIELD_PREFIX
from buildquote.models.enums import TokenScope
from buildquote.modules.rfq.router import read_form, to_uploaded_file
from buildquote.modules.sheets.client import SheetsMirror
from buildquote.modules.storage.providers.base import StorageProviderBase, UploadedFile
from buildquote.modules.tokens.service import LinkTokenService
from buildquote.modules.vendor_reply.intake_service import VendorReplyIntakeService
from buildquote.modules.vendor_reply.schemas import VendorContact, VendorReplyResponse
from buildquote.schemas.responses import ERROR_RESPONSES

router = APIRouter(prefix="/rfqs", tags=["vendor-replies"])


def _file_index(field_name: str) -> int | None:
    suffix = field_name[len(REPLY_FILE_FIELD_PREFIX):]
    return int(suffix) if suffix.isdigit() else None


async def _files_by_index(form) -> dict[int, list[UploadedFile]]:
    grouped: dict[int, list[UploadedFile]] = {}
    for name, value in form.multi_items():
        if not name.startswith(REPLY_FILE_FIELD_PREFIX) or not isinstance(value, UploadFile):
            continue
        index = _file_index(name)
        if index is None:
            continue
        grouped.setdefault(index, []).append(await to_uploaded_file(value))
    return grouped


@router.post(
    "/{rfq_id}/vendor-reply/{token}",
    response_model=VendorReplyResponse,
    responses=ERROR_RESPONSES,
)
async def submit_vendor_reply(
    rfq_id: str,
    token: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: LinkTokenService = Depends(get_tokens),
    notifier: NotificationService = Depends(get_notifier),
    storage: StorageProviderBase = Depends(get_storage),
    sheets: SheetsMirror = Depends(get_sheets),
):
    """Record a vendor's pricing for the items on their RFQ link.

    Multipart fields: ``itemReplies`` (JSON array), ``deliveryCharges``,
    ``discount``, ``summaryNotes`` and ``files_<index>`` attachments.
    """
    # Reject bad links before buffering any uploads
    tokens.verify_for(token, rfq_id, TokenScope.VENDOR)
    form = await read_form(request)
    svc = VendorReplyIntakeService(
        db, tokens=tokens, notifier=notifier, storage=storage, sheets=sheets
    )
    result = await svc.submit_reply(
        rfq_id=rfq_id,
        token=token,
        item_replies=form.get("itemReplies"),
        delivery_charge=form.get("deliveryCharges"),
        discount=form.get("discount"),
        summary_notes=str(form.get("summaryNotes") or ""),
        files_by_index=await _files_by_index(form),
    )
    return VendorReplyResponse(
        reply_id=result.reply_id,
        items_processed=result.items_processed,
        files_uploaded=result.files_uploaded,
        reply_folder_link=result.reply_folder_link,
        subtotal=result.subtotal,
        final_total=result.final_total,
        sheet_updated=result.sheet_updated,
        confirmation_email_sent=result.confirmation_email_sent,
        vendor=VendorContact.model_validate(result.vendor),
    )
