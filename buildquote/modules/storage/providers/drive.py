"""Store attachments in a shared drive through an Apps Script web app.

The web app accepts ``{"action", "folder", "files": [{name, mimeType, data}]}``
with base64 ``data`` and answers ``{"folderLink", "fileLinks"}``.
"""

from __future__ import annotations

import base64
import logging

import httpx

from buildquote.config import settings
from buildquote.exceptions import ConfigurationException, UpstreamException
from buildquote.modules.storage.providers.base import (
    FolderUpload,
    ReplyUpload,
    StorageProviderBase,
    UploadedFile,
)

logger = logging.getLogger(__name__)


def _encode(files: list[UploadedFile]) -> list[dict]:
    return [
        {
            "name": f.filename,
            "mimeType": f.content_type or "application/octet-stream",
            "data": base64.b64encode(f.content).decode("ascii"),
        }
        for f in files
    ]


class DriveStorageProvider(StorageProviderBase):
    def __init__(self, webhook_url: str | None = None) -> None:
        self.webhook_url = settings.drive_webhook_url if webhook_url is None else webhook_url
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            # Apps Script answers with a redirect to the script output
            self._client = httpx.AsyncClient(
                timeout=settings.http_timeout_seconds, follow_redirects=True
            )
        return self._client

    async def _upload(self, action: str, folder: str, files: list[UploadedFile]) -> dict:
        if not self.webhook_url:
            raise ConfigurationException("Drive webhook URL not configured")
        client = await self._get_client()
        try:
            response = await client.post(
                self.webhook_url,
                json={"action": action, "folder": folder, "files": _encode(files)},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise UpstreamException(f"Drive upload failed: {exc}") from exc
        return response.json()

    async def save_rfq_files(self, folder: str, files: list[UploadedFile]) -> FolderUpload:
        data = await self._upload("rfq", folder, files)
        logger.info("Uploaded %d RFQ file(s) to drive folder %s", len(files), folder)
        return FolderUpload(
            folder_link=data.get("folderLink", ""),
            file_links=list(data.get("fileLinks", [])),
        )

    async def save_reply_files(
        self, reply_id: str, files_by_item: dict[str, list[UploadedFile]]
    ) -> ReplyUpload:
        result = ReplyUpload()
        for item_key, files in files_by_item.items():
            data = await self._upload("reply", f"{reply_id}/{item_key}", files)
            result.item_file_links[item_key] = list(data.get("fileLinks", []))
            if not result.folder_link:
                result.folder_link = data.get("parentFolderLink") or data.get("folderLink", "")
        return result

    async def save_material_image(self, file: UploadedFile) -> str:
        data = await self._upload("material", "materials", [file])
        links = data.get("fileLinks") or [""]
        return links[0]

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
