"""Vendor reply intake — accept a vendor's per-item quote and store it.

Each submission becomes one ``vendor_reply_items`` row per answered item,
all sharing a reply id. Resubmissions are appended, never merged into
earlier rows.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal

from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.exceptions import NotFoundException, ValidationException
from buildquote.models.enums import ReplyItemStatus, TokenScope
from buildquote.models.vendor import Vendor
from buildquote.models.vendor_reply_item import VendorReplyItem
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.rfq.distribution_service import get_rfq_by_public_id
from buildquote.modules.rfq.line_items import (
    LineItem,
    match_original_item,
    parse_line_items,
    to_decimal,
)
from buildquote.modules.sheets.client import SheetsMirror
from buildquote.modules.storage.providers.base import (
    ReplyUpload,
    StorageProviderBase,
    UploadedFile,
)
from buildquote.modules.tokens.service import LinkTokenService
from buildquote.modules.vendor.directory_service import VendorDirectoryService
from buildquote.modules.vendor_reply.schemas import ItemReply
from buildquote.outcome import attempt

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def build_reply_id(rfq_id: str, vendor_email: str, now_ms: int | None = None) -> str:
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{rfq_id}-{vendor_email}-{now_ms}"


def parse_item_replies(raw: object) -> list[ItemReply]:
    """Parse the ``itemReplies`` field (JSON string or list)."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw) if raw else []
        except json.JSONDecodeError as exc:
            raise ValidationException("Invalid itemReplies format") from exc
    if raw is None:
        raw = []
    if not isinstance(raw, list):
        raise ValidationException("itemReplies must be an array")

    replies: list[ItemReply] = []
    for index, entry in enumerate(raw):
        try:
            replies.append(ItemReply.model_validate(entry))
        except ValidationError as exc:
            raise ValidationException(
                f"Invalid reply for item {index + 1}",
                details=[
                    {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
                    for e in exc.errors()
                ],
            ) from exc
    return replies


def reply_file_key(replies: list[ItemReply], index: int) -> str:
    """Folder key for files posted as ``files_<index>``."""
    if 0 <= index < len(replies) and replies[index].item_name:
        return replies[index].item_name
    return f"item-{index}"


@dataclass
class ReplyResult:
    reply_id: str
    vendor: Vendor
    items_processed: int
    subtotal: Decimal
    final_total: Decimal
    files_uploaded: int = 0
    reply_folder_link: str = ""
    sheet_updated: bool = False
    confirmation_email_sent: bool = False
    rows: list[VendorReplyItem] = field(default_factory=list)


class VendorReplyIntakeService:
    def __init__(
        self,
        db: AsyncSession,
        tokens: LinkTokenService,
        notifier: NotificationService,
        storage: StorageProviderBase,
        sheets: SheetsMirror,
        directory: VendorDirectoryService | None = None,
    ):
        self.db = db
        self.tokens = tokens
        self.notifier = notifier
        self.storage = storage
        self.sheets = sheets
        self.directory = directory or VendorDirectoryService(db)

    async def submit_reply(
        self,
        rfq_id: str,
        token: str,
        item_replies: object,
        delivery_charge: object = None,
        discount: object = None,
        summary_notes: str = "",
        files_by_index: dict[int, list[UploadedFile]] | None = None,
    ) -> ReplyResult:
        claims = self.tokens.verify_for(token, rfq_id, TokenScope.VENDOR)

        # By email: vendor names are not unique
        vendor = await self.directory.get_by_email(claims.email)
        if vendor is None:
            raise NotFoundException("Vendor not found")

        replies = parse_item_replies(item_replies)
        if not replies:
            raise ValidationException("itemReplies must contain at least one item")

        rfq = await get_rfq_by_public_id(self.db, rfq_id)
        if rfq is None:
            raise NotFoundException("RFQ not found")
        originals = parse_line_items(rfq.items)
        matched = [
            match_original_item(originals, reply.item_name, index)
            for index, reply in enumerate(replies)
        ]

        vendor_email = vendor.email or claims.email
        reply_id = build_reply_id(rfq_id, vendor_email)
        logger.info(
            "Reply %s received from %r for %s: %d item(s)",
            reply_id, vendor.name, rfq_id, len(replies),
        )

        upload = await self._upload_files(reply_id, replies, files_by_index or {})

        delivery = to_decimal(delivery_charge)
        reduction = to_decimal(discount)
        rows: list[VendorReplyItem] = []
        subtotal = Decimal("0")
        for index, (reply, original) in enumerate(zip(replies, matched)):
            row = self._build_row(
                rfq_id, reply_id, vendor, vendor_email, index, reply, original,
                delivery, reduction, upload.item_file_links.get(reply_file_key(replies, index), []),
            )
            subtotal += row.total_price
            rows.append(row)
            self.db.add(row)
        await self.db.flush()
        await self.db.commit()

        subtotal = subtotal.quantize(CENT)
        final_total = (subtotal + delivery - reduction).quantize(CENT)
        logger.info(
            "Reply %s persisted: %d row(s), subtotal=%s final=%s",
            reply_id, len(rows), subtotal, final_total,
        )

        result = ReplyResult(
            reply_id=reply_id,
            vendor=vendor,
            items_processed=len(rows),
            subtotal=subtotal,
            final_total=final_total,
            files_uploaded=upload.file_count,
            reply_folder_link=upload.folder_link,
            rows=rows,
        )

        mirrored = await attempt(
            f"Spreadsheet mirror for reply {reply_id}",
            self.sheets.append_vendor_reply(
                self._sheet_row(result, rfq_id, vendor_email, delivery, reduction, summary_notes)
            ),
        )
        result.sheet_updated = mirrored.ok and bool(mirrored.value)

        confirmation = await attempt(
            f"Reply confirmation to {vendor_email}",
            self.notifier.send_reply_confirmation(vendor_email, rfq_id, reply_id),
        )
        result.confirmation_email_sent = confirmation.ok
        return result

    async def _upload_files(
        self,
        reply_id: str,
        replies: list[ItemReply],
        files_by_index: dict[int, list[UploadedFile]],
    ) -> ReplyUpload:
        grouped: dict[str, list[UploadedFile]] = {}
        for index in sorted(files_by_index):
            if files_by_index[index]:
                grouped.setdefault(reply_file_key(replies, index), []).extend(files_by_index[index])
        if not grouped:
            return ReplyUpload()
        uploaded = await attempt(
            f"Reply file upload for {reply_id}", self.storage.save_reply_files(reply_id, grouped)
        )
        return uploaded.value if uploaded.ok else ReplyUpload()

    @staticmethod
    def _build_row(
        rfq_id: str,
        reply_id: str,
        vendor: Vendor,
        vendor_email: str,
        index: int,
        reply: ItemReply,
        original: LineItem,
        delivery: Decimal,
        reduction: Decimal,
        file_links: list[str],
    ) -> VendorReplyItem:
        # Quantity, size and unit always come from the RFQ, never from the vendor
        quantity = original.quantity
        return VendorReplyItem(
            rfq_id=rfq_id,
            reply_id=reply_id,
            line_number=original.line_number,
            vendor_name=vendor.name,
            vendor_email=vendor_email,
            item_name=original.name or reply.item_name or f"Item {index + 1}",
            size=original.size,
            unit=original.unit,
            quantity=quantity,
            unit_price=reply.unit_price,
            total_price=(reply.unit_price * quantity).quantize(CENT),
            discount=reduction,
            delivery_charge=delivery,
            lead_time=reply.lead_time,
            substitutions=reply.substitutions,
            notes=reply.notes,
            file_link=",".join(file_links) or None,
            status=ReplyItemStatus.PENDING.value,
        )

    @staticmethod
    def _sheet_row(
        result: ReplyResult,
        rfq_id: str,
        vendor_email: str,
        delivery: Decimal,
        reduction: Decimal,
        summary_notes: str,
    ) -> dict:
        prices = [
            {
                "name": row.item_name,
                "size": row.size,
                "unit": row.unit,
                "qtyRequested": str(row.quantity),
                "unitPrice": str(row.unit_price),
                "leadTime": row.lead_time.isoformat() if row.lead_time else "",
                "substitutions": row.substitutions,
                "notes": row.notes,
            }
            for row in result.rows
        ]
        return {
            "rfq_id": rfq_id,
            "reply_id": result.reply_id,
            "submitted_at": datetime.now(UTC).isoformat(),
            "vendor_name": result.vendor.name,
            "vendor_email": vendor_email,
            "vendor_phone": result.vendor.phone or "",
            "prices_text": json.dumps(prices, indent=2),
            "price_subtotal": f"{result.subtotal:.2f}",
            "discount": f"{reduction:.2f}",
            "delivery_charges": f"{delivery:.2f}",
            "total_price": f"{result.final_total:.2f}",
            "notes": summary_notes or "",
            "file_link": result.reply_folder_link,
        }
