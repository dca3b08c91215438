from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from buildquote.database.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Material(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "materials"

    category: Mapped[str] = mapped_column(String(255), nullable=False)
    item_name: Mapped[str] = mapped_column(String(500), nullable=False)
    size: Mapped[str] = mapped_column(String(255), nullable=False, server_default="")
    unit: Mapped[str] = mapped_column(String(50), nullable=False, server_default="")
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, server_default="0")
    # Comma-joined vendor names, same shape as a line item's "Vendors" string
    vendors: Mapped[str | None] = mapped_column(Text)
    image: Mapped[str | None] = mapped_column(String(1000))

    __table_args__ = (
        UniqueConstraint(
            "category", "item_name", "size", "unit", "price",
            name="uq_materials_identity",
        ),
        Index("ix_materials_category", "category"),
    )
