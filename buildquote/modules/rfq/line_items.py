"""Parsed view of an RFQ's item list and the vendor fan-out built from it.

Items reach the backend from the quote builder and from the spreadsheet
import, so both the spreadsheet column names (``"Item Name"``,
``"Size/Option"``, ``"Vendors"``...) and snake_case keys are accepted.
"""

from __future__ import annotations

import json
import logging
from decimal import Decimal, InvalidOperation

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from buildquote.exceptions import ValidationException

logger = logging.getLogger(__name__)

_ZERO = Decimal("0")


def to_decimal(value: object) -> Decimal:
    """Lenient numeric parse: blanks and garbage become 0, ``$`` and ``,`` are ignored."""
    if value is None or isinstance(value, bool):
        return _ZERO
    if isinstance(value, Decimal):
        return value
    text = str(value).strip().replace("$", "").replace(",", "")
    if not text:
        return _ZERO
    try:
        parsed = Decimal(text)
    except InvalidOperation:
        return _ZERO
    return parsed if parsed.is_finite() else _ZERO


def split_vendor_string(value: str) -> list[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def _vendor_entries(values: list | tuple) -> list[str]:
    """Vendor names from a list, skipping nulls and blanks."""
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


class LineItem(BaseModel):
    model_config = ConfigDict(extra="allow")

    line_number: int | None = Field(None, validation_alias=AliasChoices("line_number", "lineNumber"))
    category: str = Field("", validation_alias=AliasChoices("category", "Category"))
    name: str = Field(
        "", validation_alias=AliasChoices("name", "Item Name", "itemName", "item_name")
    )
    size: str = Field("", validation_alias=AliasChoices("size", "Size/Option"))
    unit: str = Field("", validation_alias=AliasChoices("unit", "Unit"))
    price: Decimal = Field(_ZERO, validation_alias=AliasChoices("price", "Price"))
    quantity: Decimal = Field(_ZERO, validation_alias=AliasChoices("quantity", "Quantity", "qty"))
    vendors: str = Field("", validation_alias=AliasChoices("vendors", "Vendors"))
    selected_vendors: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("selected_vendors", "selectedVendors"),
    )
    image: str | None = None
    notes: str | None = Field(None, validation_alias=AliasChoices("notes", "Notes"))

    @field_validator("category", "name", "size", "unit", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("price", "quantity", mode="before")
    @classmethod
    def _coerce_number(cls, value: object) -> Decimal:
        return to_decimal(value)

    @field_validator("vendors", mode="before")
    @classmethod
    def _coerce_vendor_string(cls, value: object) -> str:
        if value is None:
            return ""
        if isinstance(value, (list, tuple)):
            return ", ".join(_vendor_entries(value))
        return str(value)

    @field_validator("selected_vendors", mode="before")
    @classmethod
    def _coerce_selected(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return split_vendor_string(value)
        if isinstance(value, (list, tuple)):
            return _vendor_entries(value)
        raise ValueError("selectedVendors must be a list of vendor names")

    @property
    def display_name(self) -> str:
        return self.name or f"Item {self.line_number or '?'}"

    def vendor_names(self) -> list[str]:
        """Vendors this item goes to: the explicit selection wins over the string."""
        if self.selected_vendors:
            candidates = [v.strip() for v in self.selected_vendors]
        else:
            candidates = split_vendor_string(self.vendors)
        names: list[str] = []
        for name in candidates:
            if name and name not in names:
                names.append(name)
        return names

    def to_storage(self) -> dict:
        return self.model_dump(mode="json")

    def to_vendor_view(self) -> dict:
        """Item as shown to a vendor: the vendor assignment is not disclosed."""
        return self.model_dump(mode="json", exclude={"vendors", "selected_vendors"})


def parse_line_items(raw: object) -> list[LineItem]:
    """Parse an item list given as a list or a JSON-encoded string.

    Items without a line number are numbered by position (1-based).
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw) if raw else []
        except json.JSONDecodeError as exc:
            raise ValidationException("Invalid items JSON") from exc
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ValidationException("items must be an array")

    items: list[LineItem] = []
    for index, entry in enumerate(raw):
        if isinstance(entry, LineItem):
            item = entry
        else:
            try:
                item = LineItem.model_validate(entry)
            except ValidationError as exc:
                raise ValidationException(
                    f"Invalid item at position {index + 1}",
                    details=[{"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]} for e in exc.errors()],
                ) from exc
        if item.line_number is None:
            item = item.model_copy(update={"line_number": index + 1})
        items.append(item)
    return items


def build_vendor_buckets(items: list[LineItem]) -> dict[str, list[LineItem]]:
    """Map each vendor name to the items it should quote, in first-seen order."""
    buckets: dict[str, list[LineItem]] = {}
    for item in items:
        names = item.vendor_names()
        if not names:
            logger.info("Item %r has no vendors assigned; not sent to anyone", item.display_name)
            continue
        for name in names:
            buckets.setdefault(name, []).append(item)
    return buckets


def items_for_vendor(items: list[LineItem], vendor_name: str) -> list[LineItem]:
    return [item for item in items if vendor_name in item.vendor_names()]


def find_item_by_name(items: list[LineItem], name: str) -> LineItem | None:
    for item in items:
        if item.name == name:
            return item
    return None


def match_original_item(items: list[LineItem], name: str | None, index: int) -> LineItem:
    """Reconcile a vendor's reply with the line item it answers.

    Exact (case-sensitive) name match first, then the reply's position in the
    submission; anything else is rejected.
    """
    if name:
        item = find_item_by_name(items, name)
        if item is not None:
            return item
    if 0 <= index < len(items):
        return items[index]
    raise ValidationException(
        f"Reply item {name or index + 1!r} does not match any item on this RFQ"
    )
