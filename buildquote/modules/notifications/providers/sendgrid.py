"""SendGrid v3 mail provider."""

from __future__ import annotations

import logging

import httpx

from buildquote.config import settings
from buildquote.exceptions import ConfigurationException, UpstreamException
from buildquote.modules.notifications.providers.base import MailMessage, MailProviderBase

logger = logging.getLogger(__name__)


class SendGridProvider(MailProviderBase):
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        from_address: str | None = None,
        from_name: str | None = None,
    ) -> None:
        self.api_key = settings.sendgrid_api_key if api_key is None else api_key
        self.base_url = base_url or settings.sendgrid_base_url
        self.from_address = from_address or settings.mail_from_address
        self.from_name = from_name or settings.mail_from_name
        self._client: httpx.AsyncClient | None = None

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url, timeout=settings.http_timeout_seconds
            )
        return self._client

    def _build_payload(self, message: MailMessage) -> dict:
        payload = {
            "personalizations": [{"to": [{"email": message.to}]}],
            "from": {"email": self.from_address, "name": self.from_name},
            "subject": message.subject,
            "content": [{"type": "text/html", "value": message.html}],
        }
        if message.categories:
            payload["categories"] = message.categories
        return payload

    async def send(self, message: MailMessage) -> None:
        if not self.is_configured():
            raise ConfigurationException("SendGrid API key not configured")

        client = await self._get_client()
        try:
            response = await client.post(
                "/v3/mail/send",
                json=self._build_payload(message),
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
        except httpx.RequestError as exc:
            raise UpstreamException(f"SendGrid request failed: {exc}") from exc

        if response.status_code >= 400:
            logger.warning(
                "SendGrid rejected mail to %s: %d %s",
                message.to, response.status_code, response.text[:500],
            )
            raise UpstreamException(
                f"SendGrid returned {response.status_code}",
                details=[{"message": response.text[:500]}],
            )
        logger.info("Mail '%s' accepted for %s (%d)", message.subject, message.to, response.status_code)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
