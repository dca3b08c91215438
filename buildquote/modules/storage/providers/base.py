"""Abstract base class for attachment storage providers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def safe_name(value: str, default: str = "file") -> str:
    """Reduce ``value`` to a filesystem and URL safe path segment."""
    cleaned = _UNSAFE.sub("_", value).strip("._")
    return cleaned or default


@dataclass(frozen=True)
class UploadedFile:
    filename: str
    content_type: str
    content: bytes


@dataclass
class FolderUpload:
    folder_link: str = ""
    file_links: list[str] = field(default_factory=list)


@dataclass
class ReplyUpload:
    folder_link: str = ""
    # Keyed by reply item name, or ``item-<index>`` for unnamed items
    item_file_links: dict[str, list[str]] = field(default_factory=dict)

    @property
    def file_count(self) -> int:
        return sum(len(links) for links in self.item_file_links.values())


class StorageProviderBase(ABC):
    @abstractmethod
    async def save_rfq_files(self, folder: str, files: list[UploadedFile]) -> FolderUpload:
        """Store RFQ attachments under ``folder`` and return shareable links."""

    @abstractmethod
    async def save_reply_files(
        self, reply_id: str, files_by_item: dict[str, list[UploadedFile]]
    ) -> ReplyUpload:
        """Store a vendor reply's attachments, grouped by reply item."""

    @abstractmethod
    async def save_material_image(self, file: UploadedFile) -> str:
        """Store a catalog image and return its public path or link."""

    async def close(self) -> None:
        """Release network resources held by the provider."""
