from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from buildquote.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Rfq(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "rfqs"

    # Opaque public identifier embedded in emailed links
    rfq_id: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)

    requester_name: Mapped[str] = mapped_column(String(255), nullable=False)
    requester_email: Mapped[str] = mapped_column(String(255), nullable=False)
    requester_phone: Mapped[str] = mapped_column(String(50), nullable=False)

    project_name: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    project_address: Mapped[str] = mapped_column(String(500), nullable=False, server_default="")
    needed_by: Mapped[str | None] = mapped_column(String(50))
    notes: Mapped[str | None] = mapped_column(Text)

    # Offer sent to vendors; written once at creation
    items: Mapped[list[dict]] = mapped_column(JSONB, nullable=False, server_default="[]")
    vendors: Mapped[list[str]] = mapped_column(JSONB, nullable=False, server_default="[]")
    drive_folder_url: Mapped[str | None] = mapped_column(String(1000))

    # Aggregate award / PO fields, maintained from the spreadsheet side
    status: Mapped[str | None] = mapped_column(String(50))
    awarded_vendor_name: Mapped[str | None] = mapped_column(String(255))
    awarded_reply_id: Mapped[str | None] = mapped_column(String(255))
    awarded_total_price: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    awarded_lead_time_days: Mapped[int | None] = mapped_column(Integer)
    decision_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    po_number: Mapped[str | None] = mapped_column(String(100))
    po_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    po_notes: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        Index("ix_rfqs_requester_email", "requester_email"),
    )
