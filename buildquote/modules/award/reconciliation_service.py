"""Award reconciliation — compare vendor quotes per item and record the winner."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.exceptions import NotFoundException
from buildquote.models.enums import ReplyItemStatus, TokenScope
from buildquote.models.vendor_reply_item import VendorReplyItem
from buildquote.modules.award.schemas import AwardItemGroup, VendorQuote
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.rfq.distribution_service import get_rfq_by_public_id, project_summary
from buildquote.modules.rfq.line_items import LineItem, find_item_by_name, parse_line_items
from buildquote.modules.tokens.service import LinkTokenService
from buildquote.modules.vendor.directory_service import VendorDirectoryService
from buildquote.outcome import attempt

logger = logging.getLogger(__name__)


def _original_for(row: VendorReplyItem, originals: list[LineItem]) -> LineItem | None:
    item = find_item_by_name(originals, row.item_name)
    if item is not None:
        return item
    for candidate in originals:
        if row.line_number is not None and candidate.line_number == row.line_number:
            return candidate
    return None


def group_award_items(rows: list[VendorReplyItem], originals: list[LineItem]) -> list[AwardItemGroup]:
    """Group reply rows by item name, in order of first reply.

    Requested price, quantity, unit and size are read from the RFQ's own line
    item so every vendor is compared against what was actually asked for.
    Distinct line items sharing a name end up in one group.
    """
    groups: dict[str, AwardItemGroup] = {}
    for row in rows:
        group = groups.get(row.item_name)
        if group is None:
            original = _original_for(row, originals)
            group = AwardItemGroup(
                item_name=row.item_name,
                line_number=original.line_number if original else row.line_number,
                requested_price=original.price if original else row.unit_price,
                quantity=original.quantity if original else row.quantity,
                unit=(original.unit if original else "") or row.unit,
                size=(original.size if original else "") or row.size,
            )
            groups[row.item_name] = group
        group.vendors.append(
            VendorQuote(
                vendor_name=row.vendor_name,
                vendor_email=row.vendor_email or "",
                unit_price=row.unit_price,
                total_price=row.total_price,
                lead_time=row.lead_time,
                notes=row.notes or "",
                substitutions=row.substitutions or "",
                discount=row.discount,
                delivery_charge=row.delivery_charge,
                file_link=row.file_link,
                status=row.status,
                reply_id=row.reply_id,
                submitted_at=row.created_at,
            )
        )
    return list(groups.values())


@dataclass
class AwardResult:
    updated: int
    requester_email_sent: bool = False
    vendor_email_sent: bool = False


class AwardReconciliationService:
    def __init__(
        self,
        db: AsyncSession,
        tokens: LinkTokenService,
        notifier: NotificationService,
        directory: VendorDirectoryService | None = None,
    ):
        self.db = db
        self.tokens = tokens
        self.notifier = notifier
        self.directory = directory or VendorDirectoryService(db)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get_award_items(self, rfq_id: str, token: str) -> list[AwardItemGroup]:
        self.tokens.verify_for(token, rfq_id, TokenScope.REQUESTER)
        rfq = await get_rfq_by_public_id(self.db, rfq_id)
        if rfq is None:
            raise NotFoundException("RFQ not found")

        result = await self.db.execute(
            select(VendorReplyItem)
            .where(VendorReplyItem.rfq_id == rfq_id)
            .order_by(VendorReplyItem.created_at, VendorReplyItem.line_number)
        )
        rows = list(result.scalars().all())
        groups = group_award_items(rows, parse_line_items(rfq.items))
        logger.info("RFQ %s: %d reply row(s) in %d item group(s)", rfq_id, len(rows), len(groups))
        return groups

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def award_item(
        self, rfq_id: str, token: str, item_name: str, vendor_name: str
    ) -> AwardResult:
        """Mark every reply row for (RFQ, item, vendor) as awarded.

        Rows already awarded to another vendor for the same item are left as
        they are; the latest award does not revoke earlier ones.
        """
        claims = self.tokens.verify_for(token, rfq_id, TokenScope.REQUESTER)

        result = await self.db.execute(
            update(VendorReplyItem)
            .where(
                VendorReplyItem.rfq_id == rfq_id,
                VendorReplyItem.item_name == item_name,
                VendorReplyItem.vendor_name == vendor_name,
            )
            .values(status=ReplyItemStatus.AWARDED.value)
        )
        updated = result.rowcount or 0
        if updated == 0:
            logger.warning(
                "Award on %s matched no replies (item=%r vendor=%r)", rfq_id, item_name, vendor_name
            )
            raise NotFoundException("No items updated")
        await self.db.commit()
        logger.info("RFQ %s: item %r awarded to %r (%d row(s))", rfq_id, item_name, vendor_name, updated)

        award = AwardResult(updated=updated)

        confirmation = await attempt(
            f"Award confirmation to {claims.email}",
            self.notifier.send_requester_award_confirmation(
                claims.email, rfq_id, item_name, vendor_name
            ),
        )
        award.requester_email_sent = confirmation.ok

        vendor_email = await self._winner_email(rfq_id, item_name, vendor_name)
        rfq = await get_rfq_by_public_id(self.db, rfq_id)
        if vendor_email and rfq is not None:
            notified = await attempt(
                f"Award notification to {vendor_email}",
                self.notifier.send_vendor_award_notification(
                    vendor_email, rfq_id, item_name, vendor_name, project_summary(rfq)
                ),
            )
            award.vendor_email_sent = notified.ok
        else:
            logger.warning(
                "RFQ %s: no email for %r or RFQ details missing; vendor not notified",
                rfq_id, vendor_name,
            )
        return award

    async def _winner_email(self, rfq_id: str, item_name: str, vendor_name: str) -> str | None:
        """Directory email first, then the address captured with the reply."""
        vendor = await self.directory.get_by_name(vendor_name)
        if vendor is not None and vendor.email:
            return vendor.email
        result = await self.db.execute(
            select(VendorReplyItem.vendor_email)
            .where(
                VendorReplyItem.rfq_id == rfq_id,
                VendorReplyItem.item_name == item_name,
                VendorReplyItem.vendor_name == vendor_name,
            )
            .limit(1)
        )
        return result.scalar_one_or_none() or None
