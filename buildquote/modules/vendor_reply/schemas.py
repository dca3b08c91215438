"""Pydantic v2 schemas for vendor reply intake."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from buildquote.modules.rfq.line_items import to_decimal


class ItemReply(BaseModel):
    """One vendor answer as posted by the reply form."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    item_name: str = Field("", alias="itemName")
    unit_price: Decimal = Field(
        Decimal("0"),
        alias="pricing",
        validation_alias=AliasChoices("pricing", "unitPrice", "unit_price"),
    )
    lead_time: date | None = Field(None, alias="leadTime")
    substitutions: str = ""
    notes: str = ""

    @field_validator("item_name", "substitutions", "notes", mode="before")
    @classmethod
    def _as_text(cls, value: object) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("unit_price", mode="before")
    @classmethod
    def _as_price(cls, value: object) -> Decimal:
        return to_decimal(value)

    @field_validator("lead_time", mode="before")
    @classmethod
    def _as_date(cls, value: object) -> date | None:
        if isinstance(value, datetime):
            return value.date()
        if value is None or isinstance(value, date):
            return value
        text = str(value).strip()
        if not text:
            return None
        # Accept full ISO timestamps from clients that send Date.toISOString()
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError:
            return date.fromisoformat(text[:10])


class VendorContact(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str
    email: str | None = None
    phone: str | None = None


class VendorReplyResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Reply submitted successfully"
    reply_id: str = Field(alias="replyId")
    items_processed: int = Field(alias="itemsProcessed")
    files_uploaded: int = Field(0, alias="filesUploaded")
    reply_folder_link: str = Field("", alias="replyFolderLink")
    subtotal: Decimal
    final_total: Decimal = Field(alias="finalTotal")
    sheet_updated: bool = Field(False, alias="sheetUpdated")
    confirmation_email_sent: bool = Field(False, alias="confirmationEmailSent")
    vendor: VendorContact
