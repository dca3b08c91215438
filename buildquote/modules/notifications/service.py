"""Transactional email for each RFQ workflow transition.

Every ``send_*`` method raises on failure; callers decide whether the send is
best-effort (wrap it in :func:`buildquote.outcome.attempt`) or critical.
"""

from __future__ import annotations

import logging

from buildquote.config import settings
from buildquote.exceptions import ConfigurationException
from buildquote.modules.notifications import templates
from buildquote.modules.notifications.providers.base import MailMessage, MailProviderBase
from buildquote.modules.notifications.templates import ProjectSummary
from buildquote.modules.rfq.line_items import LineItem

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(
        self,
        provider: MailProviderBase,
        frontend_base_url: str | None = None,
        link_expiry_days: int | None = None,
    ) -> None:
        self.provider = provider
        self.frontend_base_url = (frontend_base_url or settings.frontend_base_url).rstrip("/")
        self.link_expiry_days = link_expiry_days or settings.link_token_ttl_days

    def ensure_configured(self) -> None:
        if not self.provider.is_configured():
            logger.error("Mail provider %s is not configured", type(self.provider).__name__)
            raise ConfigurationException("Server configuration error: mail provider key missing")

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def vendor_reply_link(self, rfq_id: str, token: str) -> str:
        return f"{self.frontend_base_url}/vendor-reply/{rfq_id}/{token}"

    def award_link(self, rfq_id: str, token: str) -> str:
        return f"{self.frontend_base_url}/award/{rfq_id}/{token}"

    async def _send(self, to: str, subject: str, html: str, category: str) -> None:
        body = html + templates.signature(settings.mail_from_name, settings.mail_from_address)
        await self.provider.send(
            MailMessage(to=to, subject=subject, html=body, categories=[category])
        )

    # ------------------------------------------------------------------
    # Distribution
    # ------------------------------------------------------------------

    async def send_rfq_request(
        self,
        rfq_id: str,
        vendor_name: str,
        vendor_email: str,
        project: ProjectSummary,
        items: list[LineItem],
        file_links: list[str],
        token: str,
    ) -> None:
        subject, html = templates.rfq_request(
            rfq_id=rfq_id,
            vendor_name=vendor_name,
            project=project,
            items=items,
            file_links=file_links,
            reply_link=self.vendor_reply_link(rfq_id, token),
            expiry_days=self.link_expiry_days,
        )
        await self._send(vendor_email, subject, html, "rfq-request")

    async def send_award_access(self, requester_email: str, rfq_id: str, token: str) -> None:
        subject, html = templates.award_access(
            rfq_id, self.award_link(rfq_id, token), self.link_expiry_days
        )
        await self._send(requester_email, subject, html, "award-access")

    # ------------------------------------------------------------------
    # Reply intake
    # ------------------------------------------------------------------

    async def send_reply_confirmation(self, vendor_email: str, rfq_id: str, reply_id: str) -> None:
        subject, html = templates.reply_confirmation(rfq_id, reply_id)
        await self._send(vendor_email, subject, html, "reply-confirmation")

    # ------------------------------------------------------------------
    # Award
    # ------------------------------------------------------------------

    async def send_requester_award_confirmation(
        self, requester_email: str, rfq_id: str, item_name: str, vendor_name: str
    ) -> None:
        subject, html = templates.requester_award_confirmation(rfq_id, item_name, vendor_name)
        await self._send(requester_email, subject, html, "award-confirmation")

    async def send_vendor_award_notification(
        self,
        vendor_email: str,
        rfq_id: str,
        item_name: str,
        vendor_name: str,
        project: ProjectSummary,
    ) -> None:
        subject, html = templates.vendor_award_notification(rfq_id, item_name, vendor_name, project)
        await self._send(vendor_email, subject, html, "award-notification")
