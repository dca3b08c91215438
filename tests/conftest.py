"""Pytest fixtures for BuildQuote service and router tests."""

import os
import tempfile

# Settings are read once at import time
os.environ.setdefault("LINK_TOKEN_SECRET", "test-link-secret")
os.environ.setdefault("MAIL_BACKEND", "log")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SYNC_API_KEY", "test-sync-key")
os.environ.setdefault("FRONTEND_BASE_URL", "https://quotes.example.com")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="buildquote-uploads-"))

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from buildquote.exceptions import UpstreamException  # noqa: E402
from buildquote.modules.notifications.providers.base import MailMessage  # noqa: E402
from buildquote.modules.notifications.providers.log import LogMailProvider  # noqa: E402
from buildquote.modules.notifications.service import NotificationService  # noqa: E402
from buildquote.modules.tokens.service import LinkTokenService  # noqa: E402


class FlakyMailProvider(LogMailProvider):
    """Records every message and fails for the addresses in ``fail_for``."""

    def __init__(self, fail_for: set[str] | None = None) -> None:
        super().__init__()
        self.fail_for = fail_for or set()

    async def send(self, message: MailMessage) -> None:
        if message.to in self.fail_for:
            raise UpstreamException(f"Mail provider rejected {message.to}")
        await super().send(message)


@pytest.fixture
def mock_db():
    """Create a mock AsyncSession."""
    session = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    return session


@pytest.fixture
def tokens():
    return LinkTokenService(secret="test-link-secret")


@pytest.fixture
def mail():
    return FlakyMailProvider()


@pytest.fixture
def notifier(mail):
    return NotificationService(mail, frontend_base_url="https://quotes.example.com")


@pytest.fixture
def storage():
    return AsyncMock()


@pytest.fixture
def sheets():
    mirror = AsyncMock()
    mirror.append_rfq.return_value = True
    mirror.append_vendor_reply.return_value = True
    return mirror


def make_scalar_result(value):
    """Create a mock result that returns a scalar value."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar.return_value = value
    return result


def make_scalars_result(values):
    """Create a mock result whose ``scalars().all()`` returns ``values``."""
    result = MagicMock()
    result.scalars.return_value.all.return_value = list(values)
    result.scalars.return_value.first.return_value = values[0] if values else None
    return result


def make_rowcount_result(count):
    result = MagicMock()
    result.rowcount = count
    return result
