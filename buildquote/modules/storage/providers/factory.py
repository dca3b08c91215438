"""Provider factory — select the attachment storage configured for this process."""

from __future__ import annotations

from buildquote.config import settings
from buildquote.modules.storage.providers.base import StorageProviderBase
from buildquote.modules.storage.providers.drive import DriveStorageProvider
from buildquote.modules.storage.providers.local import LocalStorageProvider

_instances: dict[str, StorageProviderBase] = {}


def get_storage_provider(backend: str | None = None) -> StorageProviderBase:
    backend = backend or settings.storage_backend
    if backend not in _instances:
        if backend == "local":
            _instances[backend] = LocalStorageProvider()
        elif backend == "drive":
            _instances[backend] = DriveStorageProvider()
        else:
            raise ValueError(f"No adapter for storage backend: {backend}")
    return _instances[backend]


async def close_storage_providers() -> None:
    """Close HTTP clients on all cached providers. Called at app shutdown."""
    for provider in _instances.values():
        await provider.close()
    _instances.clear()
