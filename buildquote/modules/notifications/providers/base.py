"""Abstract base class for outbound mail providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    html: str
    categories: list[str] = field(default_factory=list)


class MailProviderBase(ABC):
    @abstractmethod
    def is_configured(self) -> bool:
        """Return True if the provider has the credentials it needs to send."""

    @abstractmethod
    async def send(self, message: MailMessage) -> None:
        """Deliver ``message``. Raises on any failure."""

    async def close(self) -> None:
        """Release network resources held by the provider."""
