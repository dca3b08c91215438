from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from buildquote.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class VendorReplyItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "vendor_reply_items"

    # String keys on purpose: RFQs are cleared and re-imported by the
    # spreadsheet resync, replies must survive that.
    rfq_id: Mapped[str] = mapped_column(String(40), nullable=False)
    reply_id: Mapped[str] = mapped_column(String(255), nullable=False)
    line_number: Mapped[int | None] = mapped_column(Integer)

    vendor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    vendor_email: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")

    item_name: Mapped[str] = mapped_column(String(500), nullable=False)
    size: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    unit: Mapped[str] = mapped_column(String(50), nullable=False, server_default="")
    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False, server_default="0")
    unit_price: Mapped[Decimal] = mapped_column(Numeric(15, 4), nullable=False, server_default="0")
    total_price: Mapped[Decimal] = mapped_column(Numeric(15, 2), nullable=False, server_default="0")
    discount: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    delivery_charge: Mapped[Decimal | None] = mapped_column(Numeric(15, 2))
    lead_time: Mapped[date | None] = mapped_column(Date)
    substitutions: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    notes: Mapped[str] = mapped_column(Text, nullable=False, server_default="")
    file_link: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), nullable=False, server_default="pending")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'awarded')", name="ck_vendor_reply_items_status"),
        Index("ix_vendor_reply_items_rfq_id", "rfq_id"),
        Index("ix_vendor_reply_items_reply_id", "reply_id"),
        Index("ix_vendor_reply_items_award_key", "rfq_id", "item_name", "vendor_name"),
    )
