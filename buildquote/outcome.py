"""Outcome wrapper for best-effort side effects.

Emails, spreadsheet mirroring and file uploads must never fail the request
that triggered them. Instead of a bare ``try/except`` with a log line at each
call site, they are run through :func:`attempt`, which turns the exception
into a failed :class:`SideEffectResult`. Callers copy ``ok`` into the response
summary so clients can see partial completion.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SideEffectResult(Generic[T]):
    ok: bool
    value: T | None = None
    error: str | None = None

    @classmethod
    def success(cls, value: T | None = None) -> SideEffectResult[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> SideEffectResult[T]:
        return cls(ok=False, error=error)


async def attempt(label: str, operation: Awaitable[T]) -> SideEffectResult[T]:
    """Await ``operation`` and capture any exception as a failed result."""
    try:
        value = await operation
    except Exception as exc:
        logger.warning("%s failed: %s", label, exc, exc_info=True)
        return SideEffectResult.failure(str(exc) or exc.__class__.__name__)
    return SideEffectResult.success(value)
