"""Unit tests for line item parsing, vendor fan-out and reply matching."""

from __future__ import annotations

from decimal import Decimal

import pytest

from buildquote.exceptions import ValidationException
from buildquote.modules.rfq.line_items import (
    build_vendor_buckets,
    items_for_vendor,
    match_original_item,
    parse_line_items,
    to_decimal,
)


class TestToDecimal:
    def test_plain_and_formatted_numbers(self):
        assert to_decimal("3.25") == Decimal("3.25")
        assert to_decimal("$1,200.50") == Decimal("1200.50")
        assert to_decimal(7) == Decimal("7")

    def test_garbage_becomes_zero(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")
        assert to_decimal("n/a") == Decimal("0")
        assert to_decimal("NaN") == Decimal("0")
        assert to_decimal(True) == Decimal("0")


class TestParseLineItems:
    def test_spreadsheet_column_names(self):
        items = parse_line_items(
            [
                {
                    "Category": "Lumber",
                    "Item Name": "2x4 Stud",
                    "Size/Option": "8ft",
                    "Unit": "ea",
                    "Price": "3.25",
                    "Quantity": 100,
                    "Vendors": "Acme, BuildCo",
                }
            ]
        )
        item = items[0]
        assert item.name == "2x4 Stud"
        assert item.size == "8ft"
        assert item.price == Decimal("3.25")
        assert item.quantity == Decimal("100")
        assert item.vendor_names() == ["Acme", "BuildCo"]

    def test_json_string_input(self):
        items = parse_line_items('[{"name": "Rebar", "quantity": "40"}]')
        assert items[0].name == "Rebar"
        assert items[0].quantity == Decimal("40")

    def test_invalid_json_rejected(self):
        with pytest.raises(ValidationException, match="Invalid items JSON"):
            parse_line_items("[{not json")

    def test_non_array_rejected(self):
        with pytest.raises(ValidationException):
            parse_line_items({"name": "Rebar"})

    def test_line_numbers_assigned_by_position(self):
        items = parse_line_items([{"name": "A"}, {"name": "B", "lineNumber": 7}, {"name": "C"}])
        assert [item.line_number for item in items] == [1, 7, 3]

    def test_selected_vendors_win_over_vendor_string(self):
        items = parse_line_items(
            [{"name": "Drywall", "vendors": "Acme", "selectedVendors": ["BuildCo", "BuildCo"]}]
        )
        assert items[0].vendor_names() == ["BuildCo"]

    def test_storage_round_trip_keeps_vendor_assignment(self):
        stored = [item.to_storage() for item in parse_line_items([{"Item Name": "Nails", "Vendors": "Acme"}])]
        assert parse_line_items(stored)[0].vendor_names() == ["Acme"]


class TestVendorBuckets:
    def test_each_vendor_gets_its_items(self):
        items = parse_line_items(
            [
                {"name": "2x4 Stud", "vendors": "Acme,BuildCo"},
                {"name": "Rebar", "vendors": "BuildCo"},
            ]
        )
        buckets = build_vendor_buckets(items)
        assert list(buckets) == ["Acme", "BuildCo"]
        assert [i.name for i in buckets["Acme"]] == ["2x4 Stud"]
        assert [i.name for i in buckets["BuildCo"]] == ["2x4 Stud", "Rebar"]

    def test_whitespace_and_empty_vendor_names_are_dropped(self):
        items = parse_line_items([{"name": "Gravel", "vendors": " , Acme ,  ,"}])
        assert list(build_vendor_buckets(items)) == ["Acme"]

    def test_null_and_blank_selected_vendors_are_dropped(self):
        items = parse_line_items([{"name": "2x4", "selectedVendors": [None, "Acme", "  "]}])
        assert items[0].selected_vendors == ["Acme"]
        assert list(build_vendor_buckets(items)) == ["Acme"]

    def test_null_entries_in_vendor_list_are_dropped(self):
        items = parse_line_items([{"name": "2x4", "vendors": [None, "BuildCo"]}])
        assert items[0].vendors == "BuildCo"
        assert list(build_vendor_buckets(items)) == ["BuildCo"]

    def test_scalar_selected_vendors_rejected(self):
        with pytest.raises(ValidationException, match="Invalid item at position 1") as exc_info:
            parse_line_items([{"name": "2x4", "selectedVendors": 5}])
        assert "list of vendor names" in exc_info.value.details[0]["message"]

    def test_item_without_vendors_goes_nowhere(self):
        items = parse_line_items([{"name": "Sand", "vendors": "  "}])
        assert build_vendor_buckets(items) == {}

    def test_vendor_view_hides_assignment(self):
        items = parse_line_items([{"name": "Sand", "vendors": "Acme,BuildCo"}])
        view = items_for_vendor(items, "Acme")[0].to_vendor_view()
        assert "vendors" not in view
        assert "selected_vendors" not in view
        assert view["name"] == "Sand"


class TestMatchOriginalItem:
    @pytest.fixture
    def originals(self):
        return parse_line_items([{"name": "2x4 Stud"}, {"name": "Rebar"}])

    def test_exact_name_match(self, originals):
        assert match_original_item(originals, "Rebar", 0).name == "Rebar"

    def test_name_match_is_case_sensitive_then_falls_back_to_position(self, originals):
        assert match_original_item(originals, "rebar", 0).name == "2x4 Stud"

    def test_position_fallback(self, originals):
        assert match_original_item(originals, "Stud (kiln dried)", 1).name == "Rebar"

    def test_unmatched_reply_rejected(self, originals):
        with pytest.raises(ValidationException):
            match_original_item(originals, "Concrete", 5)
