"""Create schema - rfqs, vendors, vendor_reply_items, materials

Revision ID: 001
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto";')

    # 1. rfqs
    op.create_table(
        "rfqs",
        sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("rfq_id", sa.String(40), nullable=False, unique=True),
        sa.Column("requester_name", sa.String(255), nullable=False),
        sa.Column("requester_email", sa.String(255), nullable=False),
        sa.Column("requester_phone", sa.String(50), nullable=False),
        sa.Column("project_name", sa.String(255), server_default="", nullable=False),
        sa.Column("project_address", sa.String(500), server_default="", nullable=False),
        sa.Column("needed_by", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("items", JSONB, server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("vendors", JSONB, server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column("drive_folder_url", sa.String(1000), nullable=True),
        sa.Column("status", sa.String(50), nullable=True),
        sa.Column("awarded_vendor_name", sa.String(255), nullable=True),
        sa.Column("awarded_reply_id", sa.String(255), nullable=True),
        sa.Column("awarded_total_price", sa.Numeric(15, 2), nullable=True),
        sa.Column("awarded_lead_time_days", sa.Integer, nullable=True),
        sa.Column("decision_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("po_number", sa.String(100), nullable=True),
        sa.Column("po_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("po_notes", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_rfqs_requester_email", "rfqs", ["requester_email"])

    # 2. vendors
    op.create_table(
        "vendors",
        sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_vendors_name", "vendors", ["name"])
    op.create_index("ix_vendors_email", "vendors", ["email"])

    # 3. vendor_reply_items (no FK to rfqs: the RFQ sync recreates that table)
    op.create_table(
        "vendor_reply_items",
        sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("rfq_id", sa.String(40), nullable=False),
        sa.Column("reply_id", sa.String(255), nullable=False),
        sa.Column("line_number", sa.Integer, nullable=True),
        sa.Column("vendor_name", sa.String(255), nullable=False),
        sa.Column("vendor_email", sa.String(255), server_default="", nullable=False),
        sa.Column("item_name", sa.String(500), nullable=False),
        sa.Column("size", sa.String(255), server_default="", nullable=False),
        sa.Column("unit", sa.String(50), server_default="", nullable=False),
        sa.Column("quantity", sa.Numeric(12, 3), server_default="0", nullable=False),
        sa.Column("unit_price", sa.Numeric(15, 4), server_default="0", nullable=False),
        sa.Column("total_price", sa.Numeric(15, 2), server_default="0", nullable=False),
        sa.Column("discount", sa.Numeric(15, 2), nullable=True),
        sa.Column("delivery_charge", sa.Numeric(15, 2), nullable=True),
        sa.Column("lead_time", sa.Date, nullable=True),
        sa.Column("substitutions", sa.Text, server_default="", nullable=False),
        sa.Column("notes", sa.Text, server_default="", nullable=False),
        sa.Column("file_link", sa.Text, nullable=True),
        sa.Column("status", sa.String(20), server_default="pending", nullable=False),
        *_timestamps(),
        sa.CheckConstraint("status IN ('pending', 'awarded')", name="ck_vendor_reply_items_status"),
    )
    op.create_index("ix_vendor_reply_items_rfq_id", "vendor_reply_items", ["rfq_id"])
    op.create_index("ix_vendor_reply_items_reply_id", "vendor_reply_items", ["reply_id"])
    op.create_index(
        "ix_vendor_reply_items_award_key",
        "vendor_reply_items",
        ["rfq_id", "item_name", "vendor_name"],
    )

    # 4. materials
    op.create_table(
        "materials",
        sa.Column("id", UUID(as_uuid=True), server_default=sa.text("gen_random_uuid()"), primary_key=True),
        sa.Column("category", sa.String(255), nullable=False),
        sa.Column("item_name", sa.String(500), nullable=False),
        sa.Column("size", sa.String(255), server_default="", nullable=False),
        sa.Column("unit", sa.String(50), server_default="", nullable=False),
        sa.Column("price", sa.Numeric(12, 2), server_default="0", nullable=False),
        sa.Column("vendors", sa.Text, nullable=True),
        sa.Column("image", sa.String(1000), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("category", "item_name", "size", "unit", "price", name="uq_materials_identity"),
    )
    op.create_index("ix_materials_category", "materials", ["category"])


def downgrade() -> None:
    op.drop_table("materials")
    op.drop_table("vendor_reply_items")
    op.drop_table("vendors")
    op.drop_table("rfqs")
