"""Append-only mirror of RFQs and vendor replies into the shared spreadsheet.

The spreadsheet is a secondary record kept for the purchasing team. Rows are
POSTed as JSON to an Apps Script web app bound to the sheet, which appends
them to the ``RFQs`` or ``VendorReplies`` tab.
"""

from __future__ import annotations

import logging

import httpx

from buildquote.config import settings
from buildquote.exceptions import UpstreamException

logger = logging.getLogger(__name__)

RFQ_SHEET = "RFQs"
REPLY_SHEET = "VendorReplies"


class SheetsMirror:
    def __init__(self, webhook_url: str | None = None) -> None:
        self.webhook_url = settings.sheets_webhook_url if webhook_url is None else webhook_url
        self._client: httpx.AsyncClient | None = None

    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=settings.http_timeout_seconds, follow_redirects=True
            )
        return self._client

    async def _append(self, sheet: str, row: dict) -> bool:
        if not self.is_configured():
            logger.info("Spreadsheet mirror not configured; %s row not mirrored", sheet)
            return False
        client = await self._get_client()
        try:
            response = await client.post(self.webhook_url, json={"sheet": sheet, "row": row})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamException(f"Spreadsheet append to {sheet} failed: {exc}") from exc
        return True

    async def append_rfq(self, row: dict) -> bool:
        """Append one RFQ row. Returns False when the mirror is not configured."""
        return await self._append(RFQ_SHEET, row)

    async def append_vendor_reply(self, row: dict) -> bool:
        """Append one consolidated vendor reply row."""
        return await self._append(REPLY_SHEET, row)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None


_mirror: SheetsMirror | None = None


def get_sheets_mirror() -> SheetsMirror:
    global _mirror
    if _mirror is None:
        _mirror = SheetsMirror()
    return _mirror


async def close_sheets_mirror() -> None:
    global _mirror
    if _mirror is not None:
        await _mirror.close()
    _mirror = None
