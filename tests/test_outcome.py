"""Tests for best-effort side effect wrapping."""

from __future__ import annotations

import pytest

from buildquote.exceptions import UpstreamException
from buildquote.outcome import SideEffectResult, attempt


async def _ok():
    return "sent"


async def _boom():
    raise UpstreamException("SendGrid returned 500")


async def _silent():
    raise RuntimeError()


class TestAttempt:
    @pytest.mark.asyncio
    async def test_success_carries_value(self):
        result = await attempt("mail", _ok())
        assert result == SideEffectResult(ok=True, value="sent")

    @pytest.mark.asyncio
    async def test_failure_captured(self):
        result = await attempt("mail", _boom())
        assert result.ok is False
        assert result.value is None
        assert result.error == "SendGrid returned 500"

    @pytest.mark.asyncio
    async def test_failure_without_message_uses_type(self):
        result = await attempt("mail", _silent())
        assert result.error == "RuntimeError"
