# invoices/tests/test_numbering.py

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from invoices.models import Invoice, InvoiceSequence
from invoices.services.numbering import (
    format_invoice_number,
    next_invoice_number,
    parse_invoice_number,
    peek_next_invoice_number,
    reserve_invoice_number,
)

ITEM = {"type": "item", "product_id": 1, "name": "Tea", "name_en": "", "qty": 1, "price": 2, "discount": 0}


def _invoice(number: str) -> Invoice:
    return Invoice.objects.create(number=number, lines=[dict(ITEM)], total="2.00")


class NumberFormatTests(SimpleTestCase):
    def test_format(self):
        self.assertEqual(format_invoice_number(2024, 8), "INV/2024/0000000008")

    def test_parse(self):
        self.assertEqual(parse_invoice_number("INV/2024/0000000008"), (2024, 8))
        self.assertIsNone(parse_invoice_number("INV-2024-8"))
        self.assertIsNone(parse_invoice_number(None))

    def test_next_in_same_year(self):
        self.assertEqual(next_invoice_number("INV/2024/0000000007", year=2024), "INV/2024/0000000008")

    def test_new_year_restarts(self):
        self.assertEqual(next_invoice_number("INV/2023/0000000950", year=2024), "INV/2024/0000000001")

    def test_missing_or_malformed_restarts(self):
        self.assertEqual(next_invoice_number(None, year=2024), "INV/2024/0000000001")
        self.assertEqual(next_invoice_number("garbage", year=2024), "INV/2024/0000000001")
        self.assertEqual(next_invoice_number("INV/2024/0000000000", year=2024), "INV/2024/0000000001")


class ReserveInvoiceNumberTests(TestCase):
    def test_first_number_of_the_year(self):
        self.assertEqual(reserve_invoice_number(year=2030), "INV/2030/0000000001")
        self.assertEqual(InvoiceSequence.objects.get(year=2030).last_value, 1)

    def test_reservations_never_repeat(self):
        numbers = [reserve_invoice_number(year=2030) for _ in range(3)]
        self.assertEqual(numbers, ["INV/2030/0000000001", "INV/2030/0000000002", "INV/2030/0000000003"])

    def test_continues_after_existing_invoices(self):
        _invoice("INV/2030/0000000041")
        self.assertEqual(reserve_invoice_number(year=2030), "INV/2030/0000000042")

    def test_malformed_numbers_are_ignored(self):
        _invoice("INV/2030/42")
        _invoice("MANUAL-7")
        self.assertEqual(reserve_invoice_number(year=2030), "INV/2030/0000000001")

    def test_defaults_to_current_year(self):
        year = timezone.localdate().year
        self.assertEqual(reserve_invoice_number(), format_invoice_number(year, 1))

    def test_peek_does_not_reserve(self):
        first = peek_next_invoice_number(year=2030)
        second = peek_next_invoice_number(year=2030)

        self.assertEqual(first, second)
        self.assertFalse(InvoiceSequence.objects.filter(year=2030).exists())
        self.assertEqual(reserve_invoice_number(year=2030), first)
        self.assertEqual(peek_next_invoice_number(year=2030), "INV/2030/0000000002")


class InvoiceModelTests(TestCase):
    def test_lines_are_required(self):
        with self.assertRaises(ValidationError):
            Invoice.objects.create(number="INV/2030/0000000001", lines=[])

    def test_meta_lines_are_rejected(self):
        with self.assertRaises(ValidationError):
            Invoice.objects.create(number="INV/2030/0000000001", lines=[{"type": "meta"}])

    def test_invoice_is_immutable(self):
        invoice = _invoice("INV/2030/0000000001")

        invoice.total = "99.00"
        with self.assertRaises(ValidationError):
            invoice.save()
        with self.assertRaises(ValidationError):
            invoice.delete()

    def test_journal_entry_attaches_once(self):
        from accounting.models.journal import JournalEntry

        invoice = _invoice("INV/2030/0000000001")
        first = JournalEntry.objects.create(description="invoice #1", reference=f"INVOICE:{invoice.pk}")
        second = JournalEntry.objects.create(description="other")

        invoice.attach_journal_entry(first.pk)
        invoice.refresh_from_db()
        self.assertEqual(invoice.journal_entry_id, first.pk)

        with self.assertRaises(ValidationError):
            invoice.attach_journal_entry(second.pk)
