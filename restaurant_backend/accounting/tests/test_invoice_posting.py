# accounting/tests/test_invoice_posting.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from accounting.models.account import Account
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.account_resolver import get_sales_revenue_account, resolve_account
from accounting.services.exceptions import AccountResolutionError, IdempotencyError, PostingRuleError
from accounting.services.posting import build_invoice_postings, post_invoice_to_ledger
from accounting.tests.helpers import account, seed_restaurant_chart


def _lines_by_code(journal_entry_id: int) -> dict:
    result = {}
    for line in LedgerEntry.objects.filter(journal_entry_id=journal_entry_id).select_related("account"):
        result[(line.account.code, line.entry_type)] = line.amount
    return result


class InvoicePostingTests(TestCase):
    def setUp(self):
        self.chart = seed_restaurant_chart()

    def _post(self, invoice_id=1, **overrides):
        values = {
            "subtotal": "100.00",
            "discount_amount": "0.00",
            "tax_amount": "15.00",
            "total": "115.00",
            "payment_method": "cash",
            "branch": "china_town",
        }
        values.update(overrides)
        return post_invoice_to_ledger(invoice_id=invoice_id, **values)

    def test_cash_invoice_debits_cash_and_credits_revenue_and_vat(self):
        je_id = self._post()

        je = JournalEntry.objects.get(pk=je_id)
        self.assertEqual(je.reference, "INVOICE:1")
        self.assertEqual(je.description, "invoice #1")
        self.assertEqual(je.branch, "china_town")

        self.assertEqual(
            _lines_by_code(je_id),
            {
                ("1111", LedgerEntry.DEBIT): Decimal("115.00"),
                ("4111", LedgerEntry.CREDIT): Decimal("100.00"),
                ("2141", LedgerEntry.CREDIT): Decimal("15.00"),
            },
        )

    def test_discount_reduces_revenue(self):
        je_id = self._post(discount_amount="10.00", tax_amount="13.50", total="103.50")

        lines = _lines_by_code(je_id)
        self.assertEqual(lines[("4111", LedgerEntry.CREDIT)], Decimal("90.00"))
        self.assertEqual(lines[("1111", LedgerEntry.DEBIT)], Decimal("103.50"))

    def test_card_invoice_debits_bank(self):
        je_id = self._post(payment_method="card")
        self.assertIn(("1121", LedgerEntry.DEBIT), _lines_by_code(je_id))

    def test_credit_invoice_debits_receivable_and_credit_revenue(self):
        je_id = self._post(payment_method="credit")

        lines = _lines_by_code(je_id)
        self.assertIn(("1141", LedgerEntry.DEBIT), lines)
        self.assertIn(("4112", LedgerEntry.CREDIT), lines)

    def test_branch_override_selects_branch_revenue_account(self):
        je_id = self._post(branch="place_india")
        self.assertIn(("4121", LedgerEntry.CREDIT), _lines_by_code(je_id))

    def test_zero_tax_has_no_vat_line(self):
        je_id = self._post(tax_amount="0", total="100.00")
        self.assertNotIn(("2141", LedgerEntry.CREDIT), _lines_by_code(je_id))

    def test_same_invoice_cannot_post_twice(self):
        self._post(invoice_id=9)
        with self.assertRaises(IdempotencyError):
            self._post(invoice_id=9)

        self.assertEqual(JournalEntry.objects.filter(reference="INVOICE:9").count(), 1)

    def test_split_and_unknown_payment_methods_debit_cash(self):
        for invoice_id, method in ((21, "multiple"), (22, "barter"), (23, "")):
            with self.subTest(method=method):
                lines = _lines_by_code(self._post(invoice_id=invoice_id, payment_method=method))

                self.assertEqual(lines[("1111", LedgerEntry.DEBIT)], Decimal("115.00"))
                self.assertIn(("4111", LedgerEntry.CREDIT), lines)

    def test_totals_that_do_not_add_up_raise(self):
        with self.assertRaises(PostingRuleError):
            self._post(total="120.00")

    def test_zero_total_raises(self):
        with self.assertRaises(PostingRuleError):
            build_invoice_postings(
                subtotal="0",
                discount_amount="0",
                tax_amount="0",
                total="0",
                payment_method="cash",
                branch="china_town",
            )

    def test_missing_account_raises_resolution_error(self):
        vat = account(self.chart, "2141")
        vat.is_active = False
        vat.save(update_fields=["is_active", "updated_at"])

        with self.assertRaises(AccountResolutionError):
            self._post()

        self.assertFalse(JournalEntry.objects.exists())


class AccountResolverTests(TestCase):
    def setUp(self):
        self.chart = seed_restaurant_chart()

    def test_default_revenue_accounts(self):
        self.assertEqual(get_sales_revenue_account(branch="china_town").code, "4111")
        self.assertEqual(get_sales_revenue_account(branch="china_town", on_credit=True).code, "4112")

    def test_branch_names_are_normalized(self):
        self.assertEqual(get_sales_revenue_account(branch=" Place India ").code, "4121")

    @override_settings(POS_BRANCH_REVENUE_CODES={})
    def test_branch_without_override_uses_defaults(self):
        self.assertEqual(get_sales_revenue_account(branch="place_india").code, "4111")

    def test_unknown_semantic_key_raises(self):
        with self.assertRaises(AccountResolutionError):
            resolve_account("GOODWILL")

    def test_inactive_account_is_not_postable(self):
        Account.objects.filter(chart=self.chart, code="2141").update(is_active=False)

        self.assertEqual(Account.objects.postable(self.chart).filter(code="2141").count(), 0)
        with self.assertRaises(AccountResolutionError):
            resolve_account("VAT_PAYABLE")

    def test_account_code_must_be_numeric(self):
        with self.assertRaises(ValidationError):
            Account.objects.create(chart=self.chart, code="CASH", name="Cash", account_type=Account.ASSET)
