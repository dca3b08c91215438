"""Tests for workflow emails: recipients, links and escaping."""

from __future__ import annotations

import pytest

from buildquote.exceptions import ConfigurationException
from buildquote.modules.notifications.providers.log import LogMailProvider
from buildquote.modules.notifications.service import NotificationService
from buildquote.modules.notifications.templates import ProjectSummary
from buildquote.modules.rfq.line_items import parse_line_items

PROJECT = ProjectSummary(
    project_name="Maple <St> Duplex",
    project_address="12 Maple St",
    needed_by="2026-11-15",
    requester_name="Pat Rivera",
    requester_email="pat@example.com",
    requester_phone="555-0199",
    rfq_date="2026-03-09",
)


@pytest.fixture
def provider():
    return LogMailProvider()


@pytest.fixture
def notifier(provider):
    return NotificationService(provider, frontend_base_url="https://quotes.example.com/", link_expiry_days=7)


class TestLinks:
    def test_vendor_reply_link(self, notifier):
        assert notifier.vendor_reply_link("RFQ-1", "tok") == "https://quotes.example.com/vendor-reply/RFQ-1/tok"

    def test_award_link(self, notifier):
        assert notifier.award_link("RFQ-1", "tok") == "https://quotes.example.com/award/RFQ-1/tok"


class TestSends:
    @pytest.mark.asyncio
    async def test_rfq_request(self, notifier, provider):
        items = parse_line_items([{"name": "2x4 Stud", "size": "8ft", "unit": "ea", "quantity": "100"}])
        await notifier.send_rfq_request(
            "RFQ-1", "Acme", "acme@example.com", PROJECT, items, ["https://files.example.com/a.pdf"], "tok"
        )
        message = provider.sent[0]
        assert message.to == "acme@example.com"
        assert message.categories == ["rfq-request"]
        assert "RFQ-1" in message.subject
        assert "Maple &lt;St&gt; Duplex" in message.html
        assert "2x4 Stud: 8ft, ea, Qty: 100" in message.html
        assert "https://quotes.example.com/vendor-reply/RFQ-1/tok" in message.html
        assert "https://files.example.com/a.pdf" in message.html
        assert "expire in 7 days" in message.html

    @pytest.mark.asyncio
    async def test_award_access(self, notifier, provider):
        await notifier.send_award_access("pat@example.com", "RFQ-1", "tok")
        message = provider.sent[0]
        assert message.to == "pat@example.com"
        assert "https://quotes.example.com/award/RFQ-1/tok" in message.html

    @pytest.mark.asyncio
    async def test_award_emails(self, notifier, provider):
        await notifier.send_requester_award_confirmation("pat@example.com", "RFQ-1", "2x4 Stud", "Acme")
        await notifier.send_vendor_award_notification("acme@example.com", "RFQ-1", "2x4 Stud", "Acme", PROJECT)
        confirmation, notification = provider.sent
        assert confirmation.subject == "You Have Awarded Acme for RFQ #RFQ-1"
        assert notification.to == "acme@example.com"
        assert "pat@example.com" in notification.html
        assert "2026-03-09" in notification.html

    @pytest.mark.asyncio
    async def test_signature_appended(self, notifier, provider):
        await notifier.send_reply_confirmation("acme@example.com", "RFQ-1", "RFQ-1-acme@example.com-1")
        assert "Thank you," in provider.sent[0].html


class TestEnsureConfigured:
    def test_unconfigured_provider(self):
        provider = LogMailProvider()
        provider.is_configured = lambda: False
        with pytest.raises(ConfigurationException):
            NotificationService(provider).ensure_configured()
