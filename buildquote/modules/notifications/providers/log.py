"""Development mail provider that writes messages to the log instead of sending."""

from __future__ import annotations

import logging

from buildquote.modules.notifications.providers.base import MailMessage, MailProviderBase

logger = logging.getLogger(__name__)


class LogMailProvider(MailProviderBase):
    def __init__(self) -> None:
        self.sent: list[MailMessage] = []

    def is_configured(self) -> bool:
        return True

    async def send(self, message: MailMessage) -> None:
        self.sent.append(message)
        logger.info("[mail:log] to=%s subject=%s", message.to, message.subject)
