# pos/tests/test_order_store.py

from django.core.exceptions import ValidationError
from django.db import transaction
from django.test import TestCase

from invoices.models import Invoice
from pos.models import Order
from pos.services.order_store import (
    InvalidTransition,
    OrderNotFound,
    lock_and_read,
    mark_cancelled,
    mark_issued,
    validate_transition,
)
from pos.tests.helpers import make_draft


def _invoice(number="INV/2030/0000000001"):
    return Invoice.objects.create(
        number=number,
        lines=[{"type": "item", "product_id": 7, "name": "Chicken Tikka", "name_en": "", "qty": 1, "price": 10, "discount": 0}],
        total="10.00",
    )


class TransitionTests(TestCase):
    def test_allowed(self):
        validate_transition(Order.STATUS_DRAFT, Order.STATUS_ISSUED)
        validate_transition(Order.STATUS_DRAFT, Order.STATUS_CANCELLED)

    def test_terminal_states(self):
        for current in (Order.STATUS_ISSUED, Order.STATUS_CANCELLED):
            for target in (Order.STATUS_DRAFT, Order.STATUS_ISSUED, Order.STATUS_CANCELLED):
                with self.assertRaises(InvalidTransition):
                    validate_transition(current, target)


class OrderStoreTests(TestCase):
    def test_lock_and_read(self):
        order = make_draft()

        with transaction.atomic():
            self.assertEqual(lock_and_read(order.pk).pk, order.pk)

    def test_lock_and_read_unknown(self):
        with transaction.atomic(), self.assertRaises(OrderNotFound):
            lock_and_read(987654)

    def test_mark_issued_links_invoice(self):
        order = make_draft()
        invoice = _invoice()

        mark_issued(order, invoice)

        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_ISSUED)
        self.assertEqual(order.invoice_id, invoice.pk)
        self.assertEqual(invoice.order.pk, order.pk)

    def test_cancelled_order_cannot_be_issued(self):
        order = mark_cancelled(make_draft())

        with self.assertRaises(InvalidTransition):
            mark_issued(order, _invoice())


class OrderModelTests(TestCase):
    def test_issued_without_invoice_is_rejected(self):
        with self.assertRaises(ValidationError):
            Order.objects.create(branch="china_town", table_code="1", status=Order.STATUS_ISSUED)

    def test_draft_with_invoice_is_rejected(self):
        with self.assertRaises(ValidationError):
            Order.objects.create(branch="china_town", table_code="1", invoice=_invoice())

    def test_branch_and_table_required(self):
        with self.assertRaises(ValidationError):
            Order.objects.create(branch=" ", table_code="1")
        with self.assertRaises(ValidationError):
            Order.objects.create(branch="china_town", table_code="")
