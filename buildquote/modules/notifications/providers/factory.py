"""Provider factory — select the mail adapter configured for this process."""

from __future__ import annotations

from buildquote.config import settings
from buildquote.modules.notifications.providers.base import MailProviderBase
from buildquote.modules.notifications.providers.log import LogMailProvider
from buildquote.modules.notifications.providers.sendgrid import SendGridProvider

_instances: dict[str, MailProviderBase] = {}


def get_mail_provider(backend: str | None = None) -> MailProviderBase:
    backend = backend or settings.mail_backend
    if backend not in _instances:
        if backend == "sendgrid":
            _instances[backend] = SendGridProvider()
        elif backend == "log":
            _instances[backend] = LogMailProvider()
        else:
            raise ValueError(f"No adapter for mail backend: {backend}")
    return _instances[backend]


async def close_mail_providers() -> None:
    """Close HTTP clients on all cached providers. Called at app shutdown."""
    for provider in _instances.values():
        await provider.close()
    _instances.clear()
