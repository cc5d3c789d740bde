# pos/tests/test_drafts.py

import json
from decimal import Decimal

from django.test import TestCase, override_settings

from pos.models import Order
from pos.services.draft_service import (
    DraftNotEditable,
    DraftNotFound,
    InvalidCancelPassword,
    InvalidTable,
    busy_tables,
    cancel_draft,
    save_draft,
)
from pos.tests.helpers import CHICKEN_TIKKA, draft_payload, make_draft


class SaveDraftTests(TestCase):
    def test_new_draft_stores_meta_and_items_with_totals(self):
        order = make_draft(customerName="Sara", customerId="12", paymentMethod="card")

        self.assertEqual(order.status, Order.STATUS_DRAFT)
        self.assertEqual(order.branch, "china_town")
        self.assertEqual(order.table_code, "5")
        self.assertEqual(order.subtotal, Decimal("50.00"))
        self.assertEqual(order.tax_amount, Decimal("7.50"))
        self.assertEqual(order.total_amount, Decimal("57.50"))
        self.assertEqual(order.customer_id, 12)
        self.assertEqual(order.customer_name, "Sara")

        meta, *items = order.lines
        self.assertEqual(meta["type"], "meta")
        self.assertEqual(meta["table"], "5")
        self.assertEqual(meta["taxPct"], 15)
        self.assertEqual(meta["paymentMethod"], "card")
        self.assertEqual(len(items), 1)
        self.assertEqual(items[0]["product_id"], 7)

    def test_default_tax_applies_when_missing(self):
        payload = draft_payload()
        payload.pop("taxPct")

        order = save_draft(payload=payload, default_branch="china_town", default_tax_pct=10)

        self.assertEqual(order.tax_amount, Decimal("5.00"))

    def test_explicit_zero_tax_is_kept(self):
        order = make_draft(taxPct=0)
        self.assertEqual(order.tax_amount, Decimal("0.00"))
        self.assertEqual(order.total_amount, Decimal("50.00"))

    def test_percentage_discount(self):
        order = make_draft(discountPct=10)

        self.assertEqual(order.discount_amount, Decimal("5.00"))
        self.assertEqual(order.total_amount, Decimal("51.75"))

    def test_items_may_arrive_as_json_text(self):
        order = make_draft(items=json.dumps([CHICKEN_TIKKA]))
        self.assertEqual(order.total_amount, Decimal("57.50"))

    def test_exponent_quantity_is_not_a_quantity(self):
        order = make_draft(
            items=[dict(CHICKEN_TIKKA), {"id": 1, "name": "x", "qty": "1e5000", "price": 1}],
            discountPct="1e5000",
        )

        self.assertEqual(len(order.lines), 2)
        self.assertEqual(order.discount_amount, Decimal("0.00"))
        self.assertEqual(order.total_amount, Decimal("57.50"))

    def test_branch_alias_is_normalized(self):
        order = make_draft(branch="Palace India")
        self.assertEqual(order.branch, "place_india")

    def test_missing_branch_uses_default(self):
        order = make_draft(branch="")
        self.assertEqual(order.branch, "china_town")

    def test_missing_table_is_rejected(self):
        with self.assertRaises(InvalidTable):
            make_draft(table="")
        self.assertFalse(Order.objects.exists())

    def test_update_replaces_lines_and_totals(self):
        order = make_draft()

        updated = make_draft(order_id=order.pk, items=[{**CHICKEN_TIKKA, "qty": 4}])

        self.assertEqual(updated.pk, order.pk)
        self.assertEqual(Order.objects.count(), 1)
        updated.refresh_from_db()
        self.assertEqual(updated.subtotal, Decimal("100.00"))
        self.assertEqual(updated.lines[1]["qty"], 4)

    def test_update_of_unknown_order(self):
        with self.assertRaises(DraftNotFound):
            make_draft(order_id=987654)

    def test_update_of_cancelled_order_is_rejected(self):
        order = make_draft()
        cancel_draft(order_id=order.pk)

        with self.assertRaises(DraftNotEditable):
            make_draft(order_id=order.pk, items=[{**CHICKEN_TIKKA, "qty": 9}])

        order.refresh_from_db()
        self.assertEqual(order.subtotal, Decimal("50.00"))


class BusyTablesTests(TestCase):
    def test_only_draft_tables_of_the_branch(self):
        make_draft(table="5")
        make_draft(table="2")
        make_draft(table="5")
        cancelled = make_draft(table="9")
        cancel_draft(order_id=cancelled.pk)
        make_draft(branch="place_india", table="1")

        self.assertEqual(busy_tables(branch="china_town"), ["2", "5"])
        self.assertEqual(busy_tables(branch="Palace India"), ["1"])
        self.assertEqual(busy_tables(branch=""), [])


class CancelDraftTests(TestCase):
    def test_cancel(self):
        order = make_draft()

        cancelled = cancel_draft(order_id=order.pk)

        self.assertEqual(cancelled.status, Order.STATUS_CANCELLED)

    def test_cancel_twice_is_rejected(self):
        order = make_draft()
        cancel_draft(order_id=order.pk)

        with self.assertRaises(DraftNotEditable):
            cancel_draft(order_id=order.pk)

    def test_cancel_unknown(self):
        with self.assertRaises(DraftNotFound):
            cancel_draft(order_id=987654)

    @override_settings(POS_CANCEL_PASSWORD="1234")
    def test_cancel_password(self):
        order = make_draft()

        with self.assertRaises(InvalidCancelPassword):
            cancel_draft(order_id=order.pk, password="0000")

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_DRAFT)

        self.assertEqual(cancel_draft(order_id=order.pk, password="1234").status, Order.STATUS_CANCELLED)
