"""Administrative bulk sync from the purchasing spreadsheet.

The spreadsheet's Apps Script pushes whole tabs here. RFQs and vendors are
replaced wholesale; materials are upserted on their identity columns. Each
call runs in the request transaction, so a bad row leaves the tables as
they were.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import delete, func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.exceptions import ValidationException
from buildquote.models.material import Material
from buildquote.models.rfq import Rfq
from buildquote.models.vendor import Vendor
from buildquote.modules.rfq.line_items import parse_line_items, split_vendor_string, to_decimal
from buildquote.modules.storage.providers.base import StorageProviderBase, UploadedFile
from buildquote.outcome import attempt

logger = logging.getLogger(__name__)

_CIRCLED_DIGITS = re.compile("[①-⑩]")
_CENT = Decimal("0.01")

_OPTIONAL_RFQ_TEXT = (
    "notes",
    "needed_by",
    "drive_folder_url",
    "status",
    "awarded_vendor_name",
    "awarded_reply_id",
    "po_number",
    "po_notes",
)
_OPTIONAL_RFQ_DATES = ("decision_at", "po_date")


def _blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(value: object) -> str:
    return "" if value is None else str(value).strip()


def parse_timestamp(value: object, field: str, row_number: int) -> datetime | None:
    if _blank(value):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        try:
            parsed = datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValidationException(
                f"Row {row_number}: invalid date in {field}",
                details=[{"field": field, "message": str(value)}],
            ) from exc
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def parse_vendor_names(value: object) -> list[str]:
    """Vendors cell: a JSON list, or the comma-joined form the mirror writes."""
    if _blank(value):
        return []
    if isinstance(value, list):
        return [_text(v) for v in value if _text(v)]
    text = str(value).strip()
    if text.startswith("["):
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError:
            decoded = None
        if isinstance(decoded, list):
            return [_text(v) for v in decoded if _text(v)]
    return split_vendor_string(text)


def rfq_from_row(row: dict, row_number: int) -> Rfq:
    rfq_id = _text(row.get("rfq_id"))
    if not rfq_id:
        raise ValidationException(f"Row {row_number}: rfq_id is required")

    rfq = Rfq(
        rfq_id=rfq_id,
        requester_name=_text(row.get("requester_name")),
        requester_email=_text(row.get("requester_email")),
        requester_phone=_text(row.get("requester_phone")),
        project_name=_text(row.get("project_name")),
        project_address=_text(row.get("project_address")),
        items=[item.to_storage() for item in parse_line_items(row.get("items_json") or [])],
        vendors=parse_vendor_names(row.get("vendors_json")),
    )
    for field in _OPTIONAL_RFQ_TEXT:
        if not _blank(row.get(field)):
            setattr(rfq, field, _text(row[field]))
    for field in _OPTIONAL_RFQ_DATES:
        setattr(rfq, field, parse_timestamp(row.get(field), field, row_number))

    if not _blank(row.get("awarded_total_price")):
        rfq.awarded_total_price = to_decimal(row["awarded_total_price"])
    if not _blank(row.get("awarded_lead_time_days")):
        try:
            rfq.awarded_lead_time_days = int(float(str(row["awarded_lead_time_days"])))
        except ValueError as exc:
            raise ValidationException(
                f"Row {row_number}: awarded_lead_time_days must be a number"
            ) from exc

    for field in ("created_at", "updated_at"):
        stamp = parse_timestamp(row.get(field), field, row_number)
        if stamp is not None:
            setattr(rfq, field, stamp)
    return rfq


def sanitize_material(row: dict) -> dict:
    """Normalize a catalog row so the identity columns compare reliably."""
    item_name = _CIRCLED_DIGITS.sub("", _text(row.get("itemName") or row.get("item_name"))).strip()
    price = to_decimal(row.get("price")).quantize(_CENT, rounding=ROUND_HALF_UP)
    return {
        "category": _text(row.get("category")),
        "item_name": item_name,
        "size": _text(row.get("size")),
        "unit": _text(row.get("unit")).lower(),
        "price": price,
    }


@dataclass
class MaterialSyncResult:
    upserted: int = 0
    images_stored: int = 0
    images_failed: int = 0


class SyncService:
    def __init__(self, db: AsyncSession, storage: StorageProviderBase | None = None):
        self.db = db
        self.storage = storage

    async def sync_rfqs(self, rows: list[dict]) -> int:
        rfqs = [rfq_from_row(row, number) for number, row in enumerate(rows, start=1)]
        await self.db.execute(delete(Rfq))
        for rfq in rfqs:
            self.db.add(rfq)
        await self.db.flush()
        logger.info("Replaced RFQ table with %d row(s) from the spreadsheet", len(rfqs))
        return len(rfqs)

    async def sync_vendors(self, rows: list[dict]) -> int:
        if not rows:
            raise ValidationException("No vendor data received")

        vendors = []
        for number, row in enumerate(rows, start=1):
            name = _text(row.get("Vendor Name"))
            if not name:
                raise ValidationException(f"Row {number}: Vendor Name is required")
            vendors.append(
                Vendor(
                    name=name,
                    email=_text(row.get("Email")) or None,
                    phone=_text(row.get("Phone")) or None,
                    notes=_text(row.get("Notes")) or None,
                )
            )

        await self.db.execute(delete(Vendor))
        for vendor in vendors:
            self.db.add(vendor)
        await self.db.flush()
        logger.info("Replaced vendor directory with %d vendor(s)", len(vendors))
        return len(vendors)

    async def sync_materials(self, rows: list[dict]) -> MaterialSyncResult:
        result = MaterialSyncResult()
        for number, row in enumerate(rows, start=1):
            values = sanitize_material(row)
            if not values["item_name"]:
                logger.warning("Material row %d has no item name; skipped", number)
                continue
            values["vendors"] = _text(row.get("vendors")) or None

            image = await self._store_image(row.get("image"), number, result)
            update_values = {"vendors": values["vendors"], "updated_at": func.now()}
            if image:
                values["image"] = image
                update_values["image"] = image

            stmt = pg_insert(Material).values(**values)
            stmt = stmt.on_conflict_do_update(constraint="uq_materials_identity", set_=update_values)
            await self.db.execute(stmt)
            result.upserted += 1

        logger.info(
            "Synced %d material(s); images stored=%d failed=%d",
            result.upserted, result.images_stored, result.images_failed,
        )
        return result

    async def _store_image(
        self, image: object, row_number: int, result: MaterialSyncResult
    ) -> str | None:
        if not isinstance(image, dict) or not image.get("base64"):
            return None
        try:
            content = base64.b64decode(image["base64"], validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationException(f"Row {row_number}: image is not valid base64") from exc
        if self.storage is None:
            result.images_failed += 1
            return None

        upload = UploadedFile(
            filename=image.get("fileName") or f"material_{time.time_ns() // 1_000_000}.png",
            content_type=image.get("mimeType") or "image/png",
            content=content,
        )
        stored = await attempt(
            f"Material image for row {row_number}", self.storage.save_material_image(upload)
        )
        if stored.ok:
            result.images_stored += 1
            return stored.value
        result.images_failed += 1
        return None
