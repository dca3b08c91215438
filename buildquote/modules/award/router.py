"""Award reconciliation API router."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.database.session import get_db
from buildquote.dependencies import get_notifier, get_tokens
from buildquote.modules.award.reconciliation_service import AwardReconciliationService
from buildquote.modules.award.schemas import AwardItemsResponse, AwardRequest, AwardResponse
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.tokens.service import LinkTokenService
from buildquote.schemas.responses import ERROR_RESPONSES

router = APIRouter(prefix="/rfqs", tags=["awards"])


@router.get(
    "/{rfq_id}/award-items/{token}",
    response_model=AwardItemsResponse,
    responses=ERROR_RESPONSES,
)
async def get_award_items(
    rfq_id: str,
    token: str,
    db: AsyncSession = Depends(get_db),
    tokens: LinkTokenService = Depends(get_tokens),
    notifier: NotificationService = Depends(get_notifier),
):
    """Every vendor quote on the RFQ, grouped by item."""
    svc = AwardReconciliationService(db, tokens=tokens, notifier=notifier)
    items = await svc.get_award_items(rfq_id, token)
    return AwardItemsResponse(rfq_id=rfq_id, items=items)


@router.post(
    "/{rfq_id}/award/{token}",
    response_model=AwardResponse,
    responses=ERROR_RESPONSES,
)
async def award_item(
    rfq_id: str,
    token: str,
    body: AwardRequest,
    db: AsyncSession = Depends(get_db),
    tokens: LinkTokenService = Depends(get_tokens),
    notifier: NotificationService = Depends(get_notifier),
):
    """Award one item to one vendor and notify both parties."""
    svc = AwardReconciliationService(db, tokens=tokens, notifier=notifier)
    result = await svc.award_item(rfq_id, token, body.item_name, body.vendor_name)
    return AwardResponse(
        updated=result.updated,
        requester_email_sent=result.requester_email_sent,
        vendor_email_sent=result.vendor_email_sent,
    )
