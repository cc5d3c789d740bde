# pos/tests/test_line_items.py

import json
from decimal import Decimal

from django.test import SimpleTestCase

from pos.services.line_items import (
    InvalidLines,
    InvalidLinesJson,
    InvalidLineValues,
    compute_totals,
    decode_lines,
    extract_meta,
    normalize_branch_name,
    normalize_item_lines,
    to_int_id,
    to_number,
    validate_canonical_lines,
)

CANONICAL = {
    "type": "item",
    "product_id": 7,
    "name": "Chicken Tikka",
    "name_en": "",
    "qty": 2,
    "price": 25,
    "discount": 0,
}


class DecodeLinesTests(SimpleTestCase):
    def test_list_passes_through(self):
        self.assertEqual(decode_lines([{"a": 1}]), [{"a": 1}])

    def test_json_string_is_decoded(self):
        self.assertEqual(decode_lines(json.dumps([{"a": 1}])), [{"a": 1}])

    def test_double_encoded_string_is_decoded(self):
        raw = json.dumps(json.dumps([{"a": 1}]))
        self.assertEqual(decode_lines(raw), [{"a": 1}])

    def test_triple_encoded_string_is_dropped(self):
        raw = json.dumps(json.dumps(json.dumps([{"a": 1}])))
        self.assertEqual(decode_lines(raw), [])

    def test_garbage_is_dropped(self):
        self.assertEqual(decode_lines("not json"), [])
        self.assertEqual(decode_lines(None), [])
        self.assertEqual(decode_lines(json.dumps({"a": 1})), [])


class NormalizeItemLinesTests(SimpleTestCase):
    def test_alternate_key_names(self):
        items = normalize_item_lines(
            [{"item_id": "7", "name": "Chicken Tikka", "quantity": "2", "unit_price": "25.00"}]
        )
        self.assertEqual(items, [CANONICAL])

    def test_meta_and_non_item_rows_are_dropped(self):
        items = normalize_item_lines(
            [
                {"type": "meta", "table": "5"},
                {"type": "tax", "qty": 1, "name": "VAT"},
                dict(CANONICAL),
            ]
        )
        self.assertEqual(items, [CANONICAL])

    def test_zero_or_missing_quantity_is_dropped(self):
        items = normalize_item_lines(
            [
                {"id": 1, "name": "Naan", "qty": 0, "price": 3},
                {"id": 2, "name": "Rice", "price": 4},
                {"id": 3, "name": "Tea", "qty": "abc", "price": 2},
            ]
        )
        self.assertEqual(items, [])

    def test_only_positive_quantity_items_survive_next_to_meta(self):
        items = normalize_item_lines(
            [
                {"type": "meta", "table": "5", "taxPct": 15},
                {"id": 1, "name": "Naan", "qty": 0, "price": 3},
                {"id": 2, "name": "Rice", "qty": -1, "price": 4},
                {"id": 3, "name": "Tea", "qty": "abc", "price": 2},
                {"id": 4, "name": "Lassi", "qty": 3, "price": 6},
            ]
        )

        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["product_id"], 4)
        self.assertEqual(items[0]["qty"], 3)

    def test_line_without_reference_or_name_is_dropped(self):
        self.assertEqual(normalize_item_lines([{"qty": 1, "price": 5, "name": "  "}]), [])

    def test_unusable_reference_without_name_is_dropped(self):
        raw = [
            {"product_id": "abc", "qty": 1, "price": 5},
            {"item_id": "7.5", "name": "", "qty": 1, "price": 5},
            {"id": 0, "name": " ", "qty": 1, "price": 5},
        ]
        self.assertEqual(normalize_item_lines(raw), [])

    def test_unusable_reference_with_name_is_kept_without_id(self):
        items = normalize_item_lines([{"product_id": "abc", "name": "Falooda", "qty": 1, "price": 5}])

        self.assertEqual(len(items), 1)
        self.assertIsNone(items[0]["product_id"])
        self.assertEqual(items[0]["name"], "Falooda")

    def test_out_of_range_numbers_are_non_numeric(self):
        items = normalize_item_lines(
            [
                {"id": 1, "name": "Huge", "qty": "1e5000", "price": 1},
                {"id": 2, "name": "Pricey", "qty": 1, "price": "1e5000", "discount": 10**5000},
            ]
        )

        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["product_id"], 2)
        self.assertEqual(items[0]["price"], 0)
        self.assertEqual(items[0]["discount"], 0)

    def test_name_without_reference_is_kept(self):
        items = normalize_item_lines([{"name": "Off-menu dish", "qty": 1, "price": "12.5"}])

        self.assertEqual(len(items), 1)
        self.assertIsNone(items[0]["product_id"])
        self.assertEqual(items[0]["price"], 12.5)

    def test_non_numeric_values_coerce_to_zero(self):
        items = normalize_item_lines([{"id": 4, "name": "Soup", "qty": 1, "price": "free", "discount": None}])

        self.assertEqual(items[0]["price"], 0)
        self.assertEqual(items[0]["discount"], 0)

    def test_json_string_elements_are_decoded(self):
        items = normalize_item_lines([json.dumps(CANONICAL)])
        self.assertEqual(items, [CANONICAL])

    def test_order_is_preserved(self):
        raw = [
            {"id": 2, "name": "B", "qty": 1, "price": 1},
            {"id": 1, "name": "A", "qty": 1, "price": 1},
        ]
        self.assertEqual([i["product_id"] for i in normalize_item_lines(raw)], [2, 1])

    def test_normalizing_canonical_lines_is_a_no_op(self):
        once = normalize_item_lines(
            [{"item_id": 3, "name": "Dal", "quantity": 1.5, "unit_price": "8.25", "discount": "1"}]
        )
        self.assertEqual(normalize_item_lines(once), once)


class ValidateCanonicalLinesTests(SimpleTestCase):
    def test_canonical_lines_pass(self):
        validate_canonical_lines([dict(CANONICAL)])

    def test_not_a_list(self):
        with self.assertRaises(InvalidLines):
            validate_canonical_lines({"type": "item"})

    def test_element_not_an_object(self):
        with self.assertRaises(InvalidLines):
            validate_canonical_lines(["item"])

    def test_string_price_is_rejected(self):
        with self.assertRaises(InvalidLineValues):
            validate_canonical_lines([{**CANONICAL, "price": "25"}])

    def test_nan_is_rejected(self):
        with self.assertRaises(InvalidLineValues):
            validate_canonical_lines([{**CANONICAL, "qty": float("nan")}])

    def test_non_integer_product_id_is_rejected(self):
        with self.assertRaises(InvalidLineValues):
            validate_canonical_lines([{**CANONICAL, "product_id": "7"}])

    def test_unserializable_line_is_rejected(self):
        with self.assertRaises(InvalidLinesJson):
            validate_canonical_lines([{**CANONICAL, "note": object()}])

    def test_error_codes(self):
        self.assertEqual(InvalidLines.code, "invalid_lines")
        self.assertEqual(InvalidLineValues.code, "invalid_values")
        self.assertEqual(InvalidLinesJson.code, "invalid_json")


class CoercionTests(SimpleTestCase):
    def test_to_number(self):
        self.assertEqual(to_number("3"), 3)
        self.assertEqual(to_number(Decimal("2.50")), 2.5)
        self.assertEqual(to_number(True), 0)
        self.assertEqual(to_number(float("inf")), 0)
        self.assertEqual(to_number(None), 0)
        self.assertEqual(to_number("1e5000"), 0)
        self.assertEqual(to_number(1e300), 0)
        self.assertEqual(to_number("-1e13"), 0)

    def test_to_int_id(self):
        self.assertEqual(to_int_id("7"), 7)
        self.assertIsNone(to_int_id("7.5"))
        self.assertIsNone(to_int_id(None))
        self.assertIsNone(to_int_id("abc"))

    def test_branch_aliases(self):
        self.assertEqual(normalize_branch_name("Palace India"), "place_india")
        self.assertEqual(normalize_branch_name("palce_india"), "place_india")
        self.assertEqual(normalize_branch_name(" China Town "), "china_town")
        self.assertEqual(normalize_branch_name(None), "")


class MetaAndTotalsTests(SimpleTestCase):
    def test_extract_meta(self):
        meta = {"type": "meta", "taxPct": 15}
        self.assertEqual(extract_meta(json.dumps([meta, CANONICAL])), meta)
        self.assertIsNone(extract_meta([CANONICAL]))

    def test_compute_totals(self):
        totals = compute_totals([CANONICAL], discount_pct=10, tax_pct=15)

        self.assertEqual(totals.subtotal, Decimal("50.00"))
        self.assertEqual(totals.discount_amount, Decimal("5.00"))
        self.assertEqual(totals.tax_amount, Decimal("6.75"))
        self.assertEqual(totals.total, Decimal("51.75"))

    def test_line_discount_is_an_amount(self):
        totals = compute_totals([{**CANONICAL, "discount": 2}], tax_pct=15)

        self.assertEqual(totals.discount_amount, Decimal("2.00"))
        self.assertEqual(totals.tax_amount, Decimal("7.20"))
        self.assertEqual(totals.total, Decimal("55.20"))

    def test_no_items(self):
        totals = compute_totals([], tax_pct=15)
        self.assertEqual(totals.total, Decimal("0.00"))
