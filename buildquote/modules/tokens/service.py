"""Signed, time-limited link tokens for vendor and requester emails.

A link token proves that its bearer received an email for one RFQ (and, for
vendor links, one vendor). It is not a session token and carries no other
authorization.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from buildquote.config import settings
from buildquote.exceptions import (
    ConfigurationException,
    ForbiddenException,
    UnauthorizedException,
)
from buildquote.models.enums import TokenScope

logger = logging.getLogger(__name__)

# Older links spell the same claims differently; first match wins.
_RFQ_ID_KEYS = ("rfqId", "rfq_id")
_EMAIL_KEYS = ("email", "vendorEmail", "vendor_email")
_VENDOR_NAME_KEYS = ("vendorName", "vendor_name")


def _first_claim(payload: dict, keys: tuple[str, ...]) -> str | None:
    for key in keys:
        value = payload.get(key)
        if value:
            return str(value)
    return None


@dataclass(frozen=True)
class LinkClaims:
    """Normalized claims of a verified link token."""

    email: str
    rfq_id: str
    scope: TokenScope
    vendor_name: str | None = None

    def require_rfq(self, rfq_id: str) -> None:
        if self.rfq_id != rfq_id:
            raise ForbiddenException("Invalid RFQ link")

    def require_scope(self, scope: TokenScope) -> None:
        if self.scope != scope:
            raise ForbiddenException("This link cannot be used for this action")


def normalize_claims(payload: dict) -> LinkClaims:
    """Map a decoded token payload onto :class:`LinkClaims`."""
    email = _first_claim(payload, _EMAIL_KEYS)
    rfq_id = _first_claim(payload, _RFQ_ID_KEYS)
    if not email or not rfq_id:
        raise UnauthorizedException("Token is missing required claims")

    vendor_name = _first_claim(payload, _VENDOR_NAME_KEYS)
    raw_scope = payload.get("scope")
    try:
        scope = TokenScope(raw_scope) if raw_scope else None
    except ValueError as exc:
        raise UnauthorizedException("Token has an unknown scope") from exc
    if scope is None:
        scope = TokenScope.VENDOR if vendor_name else TokenScope.REQUESTER

    if scope == TokenScope.VENDOR and not vendor_name:
        raise UnauthorizedException("Token is missing required claims")

    return LinkClaims(email=email, rfq_id=rfq_id, scope=scope, vendor_name=vendor_name)


class LinkTokenService:
    def __init__(
        self,
        secret: str | None = None,
        algorithm: str | None = None,
        ttl: timedelta | None = None,
    ) -> None:
        self.secret = settings.link_token_secret if secret is None else secret
        self.algorithm = algorithm or settings.link_token_algorithm
        self.ttl = ttl or timedelta(days=settings.link_token_ttl_days)

    def ensure_configured(self) -> None:
        if not self.secret:
            logger.error("Link token secret is not configured")
            raise ConfigurationException("Server configuration error: link token secret missing")

    # ------------------------------------------------------------------
    # Issue
    # ------------------------------------------------------------------

    def issue(self, claims: dict, ttl: timedelta | None = None) -> str:
        self.ensure_configured()
        expires_at = datetime.now(UTC) + (ttl or self.ttl)
        payload = {**claims, "exp": expires_at}
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def issue_vendor_token(self, vendor_name: str, vendor_email: str, rfq_id: str) -> str:
        return self.issue(
            {
                "vendorName": vendor_name,
                "vendorEmail": vendor_email,
                "rfqId": rfq_id,
                "scope": TokenScope.VENDOR.value,
            }
        )

    def issue_requester_token(self, email: str, rfq_id: str) -> str:
        return self.issue(
            {"email": email, "rfqId": rfq_id, "scope": TokenScope.REQUESTER.value}
        )

    # ------------------------------------------------------------------
    # Verify
    # ------------------------------------------------------------------

    def verify(self, token: str) -> LinkClaims:
        """Decode ``token``. Raises UnauthorizedException when invalid or expired."""
        self.ensure_configured()
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as exc:
            logger.warning("Link token validation failed: %s", exc)
            raise UnauthorizedException("Invalid or expired token") from exc
        return normalize_claims(payload)

    def verify_for(self, token: str, rfq_id: str, scope: TokenScope) -> LinkClaims:
        """Verify ``token`` and check it was issued for ``rfq_id`` and ``scope``."""
        claims = self.verify(token)
        claims.require_rfq(rfq_id)
        claims.require_scope(scope)
        return claims
