# invoices/tests/test_concurrency.py

"""
Concurrent issuance against a real row-locking database.

SQLite serializes whole-database writes and has no SELECT ... FOR UPDATE,
so these run on PostgreSQL only.
"""

from __future__ import annotations

import threading
import unittest

from django.db import connection
from django.test import TransactionTestCase

from accounting.models.journal import JournalEntry
from accounting.tests.helpers import seed_restaurant_chart
from invoices.models import Invoice
from invoices.services.issuance_orchestrator import AlreadyIssued, issue_invoice
from pos.models import Order
from pos.tests.helpers import make_draft


def _run_concurrently(targets):
    barrier = threading.Barrier(len(targets))
    results = [None] * len(targets)

    def runner(idx, fn):
        try:
            barrier.wait()
            results[idx] = fn()
        except Exception as exc:  # collected for assertions in the main thread
            results[idx] = exc
        finally:
            connection.close()

    threads = [threading.Thread(target=runner, args=(i, fn)) for i, fn in enumerate(targets)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)
    return results


@unittest.skipUnless(connection.vendor == "postgresql", "needs SELECT ... FOR UPDATE")
class ConcurrentIssuanceTests(TransactionTestCase):
    def setUp(self):
        seed_restaurant_chart()

    def test_same_order_issued_once(self):
        order = make_draft()

        results = _run_concurrently(
            [lambda: issue_invoice(order_id=order.pk, default_branch="china_town") for _ in range(2)]
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(successes), 1)
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0], AlreadyIssued)

        self.assertEqual(Invoice.objects.count(), 1)
        self.assertEqual(JournalEntry.objects.count(), 1)
        order.refresh_from_db()
        self.assertEqual(order.status, Order.STATUS_ISSUED)
        self.assertEqual(order.invoice_id, successes[0].invoice.pk)

    def test_different_orders_get_distinct_numbers(self):
        orders = [make_draft(table=str(i)) for i in range(4)]

        results = _run_concurrently(
            [lambda pk=o.pk: issue_invoice(order_id=pk, default_branch="china_town") for o in orders]
        )

        for r in results:
            self.assertNotIsInstance(r, Exception)

        numbers = list(Invoice.objects.values_list("number", flat=True))
        self.assertEqual(len(numbers), 4)
        self.assertEqual(len(set(numbers)), 4)
