"""Pydantic v2 schemas for award reconciliation endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------


class VendorQuote(BaseModel):
    """One vendor's answer for one item, as shown on the award screen."""

    model_config = ConfigDict(populate_by_name=True)

    vendor_name: str = Field(alias="vendorName")
    vendor_email: str = Field("", alias="vendorEmail")
    unit_price: Decimal = Field(alias="unitPrice")
    total_price: Decimal = Field(alias="totalPrice")
    lead_time: date | None = Field(None, alias="leadTime")
    notes: str = ""
    substitutions: str = ""
    discount: Decimal | None = None
    delivery_charge: Decimal | None = Field(None, alias="deliveryCharge")
    file_link: str | None = Field(None, alias="fileLink")
    status: str
    reply_id: str = Field(alias="replyId")
    submitted_at: datetime | None = Field(None, alias="submittedAt")


class AwardItemGroup(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    item_name: str = Field(alias="itemName")
    line_number: int | None = Field(None, alias="lineNumber")
    requested_price: Decimal = Field(Decimal("0"), alias="requestedPrice")
    quantity: Decimal = Decimal("0")
    unit: str = ""
    size: str = ""
    vendors: list[VendorQuote] = Field(default_factory=list)


class AwardItemsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rfq_id: str = Field(alias="rfqId")
    items: list[AwardItemGroup]


# ---------------------------------------------------------------------------
# Write side
# ---------------------------------------------------------------------------


class AwardRequest(BaseModel):
    item_name: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("item_name", "itemName")
    )
    vendor_name: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("vendor_name", "vendorName")
    )


class AwardResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    updated: int
    requester_email_sent: bool = Field(False, alias="requesterEmailSent")
    vendor_email_sent: bool = Field(False, alias="vendorEmailSent")
