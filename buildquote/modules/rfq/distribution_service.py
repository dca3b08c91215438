"""RFQ distribution — persist a quote request and fan it out to vendors.

Only the RFQ insert is on the critical path. Attachment upload, the
spreadsheet mirror and every email are best-effort: each runs through
:func:`buildquote.outcome.attempt` and its outcome is reported in the
returned :class:`DistributionResult`.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from buildquote.exceptions import NotFoundException, ValidationException
from buildquote.models.enums import TokenScope
from buildquote.models.rfq import Rfq
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.notifications.templates import ProjectSummary
from buildquote.modules.rfq.constants import EMAIL_PATTERN, RFQ_ID_PREFIX, RFQ_ID_RANDOM_LENGTH
from buildquote.modules.rfq.line_items import (
    LineItem,
    build_vendor_buckets,
    items_for_vendor,
    parse_line_items,
)
from buildquote.modules.rfq.schemas import ProjectInfo
from buildquote.modules.sheets.client import SheetsMirror
from buildquote.modules.storage.providers.base import (
    FolderUpload,
    StorageProviderBase,
    UploadedFile,
)
from buildquote.modules.tokens.service import LinkTokenService
from buildquote.modules.vendor.directory_service import VendorDirectoryService, resolve_email
from buildquote.outcome import attempt

logger = logging.getLogger(__name__)


def generate_rfq_id(now: datetime | None = None) -> str:
    """``RFQ-YYYYMMDD-<10 hex>``: unique, sortable by day, no requester data."""
    now = now or datetime.now(UTC)
    suffix = uuid.uuid4().hex[:RFQ_ID_RANDOM_LENGTH].upper()
    return f"{RFQ_ID_PREFIX}-{now:%Y%m%d}-{suffix}"


def project_summary(rfq: Rfq) -> ProjectSummary:
    created = rfq.created_at.date().isoformat() if rfq.created_at else ""
    return ProjectSummary(
        project_name=rfq.project_name or "",
        project_address=rfq.project_address or "",
        needed_by=rfq.needed_by or "",
        notes=rfq.notes or "",
        requester_name=rfq.requester_name or "",
        requester_email=rfq.requester_email or "",
        requester_phone=rfq.requester_phone or "",
        rfq_date=created,
    )


async def get_rfq_by_public_id(db: AsyncSession, rfq_id: str) -> Rfq | None:
    result = await db.execute(select(Rfq).where(Rfq.rfq_id == rfq_id))
    return result.scalar_one_or_none()


def validate_request(project: ProjectInfo, items: list[LineItem]) -> None:
    """Reject incomplete requests before anything is stored or sent."""
    if not items:
        raise ValidationException("Missing required fields: projectInfo or items")

    missing = [
        alias
        for alias, value in (
            ("requesterName", project.requester_name),
            ("requesterEmail", project.requester_email),
            ("requesterPhone", project.requester_phone),
        )
        if not value
    ]
    if missing:
        raise ValidationException(
            "Contact information (name, email, phone) is required",
            details=[{"field": name, "message": "Field required"} for name in missing],
        )

    if not EMAIL_PATTERN.match(project.requester_email):
        raise ValidationException(
            "Invalid email format",
            details=[{"field": "requesterEmail", "message": "Invalid email format"}],
        )


@dataclass
class DistributionResult:
    rfq_id: str
    folder_link: str = ""
    file_links: list[str] = field(default_factory=list)
    emails_sent: int = 0
    emails_skipped: int = 0
    emails_failed: int = 0
    sheet_updated: bool = False
    award_email_sent: bool = False


@dataclass
class VendorItems:
    rfq: Rfq
    vendor_name: str
    items: list[LineItem]


class RfqDistributionService:
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

    # ------------------------------------------------------------------
    # Create + distribute
    # ------------------------------------------------------------------

    async def create_rfq(
        self,
        project: ProjectInfo,
        raw_items: object,
        attachments: list[UploadedFile] | None = None,
    ) -> DistributionResult:
        items = parse_line_items(raw_items)
        validate_request(project, items)
        # Nothing is stored if links could not be minted or mailed
        self.tokens.ensure_configured()
        self.notifier.ensure_configured()

        rfq_id = generate_rfq_id()
        buckets = build_vendor_buckets(items)
        logger.info(
            "RFQ %s initiated: %d item(s), %d vendor(s): %s",
            rfq_id, len(items), len(buckets),
            ", ".join(f"{name}={len(bucket)}" for name, bucket in buckets.items()) or "none",
        )

        upload = await self._upload_attachments(rfq_id, attachments or [])

        rfq = Rfq(
            rfq_id=rfq_id,
            requester_name=project.requester_name,
            requester_email=project.requester_email,
            requester_phone=project.requester_phone,
            project_name=project.project_name,
            project_address=project.project_address,
            needed_by=project.needed_by or None,
            notes=project.notes or None,
            items=[item.to_storage() for item in items],
            vendors=list(buckets),
            drive_folder_url=upload.folder_link or None,
        )
        self.db.add(rfq)
        await self.db.flush()
        await self.db.commit()
        logger.info("Persisted RFQ %s", rfq_id)

        result = DistributionResult(
            rfq_id=rfq_id, folder_link=upload.folder_link, file_links=upload.file_links
        )

        mirrored = await attempt(
            f"Spreadsheet mirror for {rfq_id}", self.sheets.append_rfq(self._sheet_row(rfq))
        )
        result.sheet_updated = mirrored.ok and bool(mirrored.value)

        summary = ProjectSummary(
            project_name=project.project_name,
            project_address=project.project_address,
            needed_by=project.needed_by,
            notes=project.notes,
            requester_name=project.requester_name,
            requester_email=project.requester_email,
            requester_phone=project.requester_phone,
            rfq_date=datetime.now(UTC).date().isoformat(),
        )
        await self._notify_vendors(rfq_id, summary, buckets, upload.file_links, result)

        award_access = await attempt(
            f"Award access email for {rfq_id}",
            self._send_award_access(project.requester_email, rfq_id),
        )
        result.award_email_sent = award_access.ok

        logger.info(
            "RFQ %s distributed: sent=%d skipped=%d failed=%d award_email=%s",
            rfq_id, result.emails_sent, result.emails_skipped, result.emails_failed,
            result.award_email_sent,
        )
        return result

    async def _upload_attachments(self, rfq_id: str, attachments: list[UploadedFile]) -> FolderUpload:
        if not attachments:
            return FolderUpload()
        uploaded = await attempt(
            f"Attachment upload for {rfq_id}", self.storage.save_rfq_files(rfq_id, attachments)
        )
        return uploaded.value if uploaded.ok else FolderUpload()

    async def _notify_vendors(
        self,
        rfq_id: str,
        summary: ProjectSummary,
        buckets: dict[str, list[LineItem]],
        file_links: list[str],
        result: DistributionResult,
    ) -> None:
        lookup = await self.directory.email_lookup()

        for vendor_name, vendor_items in buckets.items():
            email = resolve_email(vendor_name, lookup)
            if not email:
                logger.warning("RFQ %s: no email for vendor %r, skipping", rfq_id, vendor_name)
                result.emails_skipped += 1
                continue

            sent = await attempt(
                f"RFQ email to {vendor_name} <{email}>",
                self._send_vendor_request(rfq_id, vendor_name, email, summary, vendor_items, file_links),
            )
            if sent.ok:
                result.emails_sent += 1
                logger.info("RFQ %s sent to %r (%d item(s))", rfq_id, vendor_name, len(vendor_items))
            else:
                result.emails_failed += 1

    async def _send_vendor_request(
        self,
        rfq_id: str,
        vendor_name: str,
        email: str,
        summary: ProjectSummary,
        items: list[LineItem],
        file_links: list[str],
    ) -> None:
        token = self.tokens.issue_vendor_token(vendor_name, email, rfq_id)
        await self.notifier.send_rfq_request(
            rfq_id, vendor_name, email, summary, items, file_links, token
        )

    async def _send_award_access(self, requester_email: str, rfq_id: str) -> None:
        token = self.tokens.issue_requester_token(requester_email, rfq_id)
        await self.notifier.send_award_access(requester_email, rfq_id, token)

    @staticmethod
    def _sheet_row(rfq: Rfq) -> dict:
        return {
            "rfq_id": rfq.rfq_id,
            "created_at": datetime.now(UTC).isoformat(),
            "requester_name": rfq.requester_name,
            "requester_email": rfq.requester_email,
            "requester_phone": rfq.requester_phone,
            "project_name": rfq.project_name,
            "project_address": rfq.project_address,
            "needed_by": rfq.needed_by or "",
            "notes": rfq.notes or "",
            "items_json": json.dumps(rfq.items),
            "vendors_json": ", ".join(rfq.vendors),
            "drive_folder_url": rfq.drive_folder_url or "",
        }

    # ------------------------------------------------------------------
    # Vendor view
    # ------------------------------------------------------------------

    async def get_vendor_items(self, rfq_id: str, token: str) -> VendorItems:
        """Items on ``rfq_id`` addressed to the vendor the token was issued to."""
        claims = self.tokens.verify_for(token, rfq_id, TokenScope.VENDOR)
        rfq = await get_rfq_by_public_id(self.db, rfq_id)
        if rfq is None:
            raise NotFoundException("RFQ not found")
        items = items_for_vendor(parse_line_items(rfq.items), claims.vendor_name)
        return VendorItems(rfq=rfq, vendor_name=claims.vendor_name, items=items)
