"""FastAPI dependency providers for the outbound collaborators.

Routers depend on these rather than on the factories directly so tests can
swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

import secrets

from fastapi import Depends, Header

from buildquote.config import settings
from buildquote.exceptions import ConfigurationException, UnauthorizedException
from buildquote.modules.notifications.providers.base import MailProviderBase
from buildquote.modules.notifications.providers.factory import get_mail_provider
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.sheets.client import SheetsMirror, get_sheets_mirror
from buildquote.modules.storage.providers.base import StorageProviderBase
from buildquote.modules.storage.providers.factory import get_storage_provider
from buildquote.modules.tokens.service import LinkTokenService


def get_mail() -> MailProviderBase:
    return get_mail_provider()


def get_notifier(provider: MailProviderBase = Depends(get_mail)) -> NotificationService:
    return NotificationService(provider)


def get_storage() -> StorageProviderBase:
    return get_storage_provider()


def get_sheets() -> SheetsMirror:
    return get_sheets_mirror()


def get_tokens() -> LinkTokenService:
    return LinkTokenService()


def require_sync_key(x_sync_key: str | None = Header(None)) -> None:
    """Guard for the administrative sync endpoints."""
    if not settings.sync_api_key:
        raise ConfigurationException("Server configuration error: sync key missing")
    if not x_sync_key or not secrets.compare_digest(x_sync_key, settings.sync_api_key):
        raise UnauthorizedException("Invalid sync key")
