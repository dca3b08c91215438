"""Store attachments on the local filesystem, served back under ``/uploads``."""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

from buildquote.config import settings
from buildquote.modules.storage.providers.base import (
    FolderUpload,
    ReplyUpload,
    StorageProviderBase,
    UploadedFile,
    safe_name,
)

logger = logging.getLogger(__name__)


class LocalStorageProvider(StorageProviderBase):
    def __init__(self, root: str | Path | None = None, public_base_url: str | None = None) -> None:
        self.root = Path(root or settings.upload_dir)
        self.public_base_url = (public_base_url or settings.public_base_url).rstrip("/")

    def _link(self, *parts: str) -> str:
        return f"{self.public_base_url}/uploads/" + "/".join(parts)

    async def _write(self, relative: Path, content: bytes) -> None:
        target = self.root / relative

        def _do_write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        await asyncio.to_thread(_do_write)

    async def _save_into(self, folder: str, files: list[UploadedFile]) -> list[str]:
        links: list[str] = []
        for index, upload in enumerate(files, start=1):
            name = f"{index:02d}-{safe_name(upload.filename)}"
            await self._write(Path(folder) / name, upload.content)
            links.append(self._link(folder, name))
        return links

    async def save_rfq_files(self, folder: str, files: list[UploadedFile]) -> FolderUpload:
        folder = safe_name(folder, default="rfq")
        links = await self._save_into(folder, files)
        logger.info("Stored %d RFQ file(s) in %s", len(links), self.root / folder)
        return FolderUpload(folder_link=self._link(folder), file_links=links)

    async def save_reply_files(
        self, reply_id: str, files_by_item: dict[str, list[UploadedFile]]
    ) -> ReplyUpload:
        base = f"replies/{safe_name(reply_id, default='reply')}"
        result = ReplyUpload(folder_link=self._link(base))
        for item_key, files in files_by_item.items():
            item_folder = f"{base}/{safe_name(item_key, default='item')}"
            result.item_file_links[item_key] = await self._save_into(item_folder, files)
        logger.info("Stored %d reply file(s) for %s", result.file_count, reply_id)
        return result

    async def save_material_image(self, file: UploadedFile) -> str:
        name = f"{uuid.uuid4().hex[:12]}-{safe_name(file.filename, default='image')}"
        await self._write(Path("materials") / name, file.content)
        return f"/uploads/materials/{name}"
