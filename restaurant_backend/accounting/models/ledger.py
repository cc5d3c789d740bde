# accounting/models/ledger.py

"""
LEDGER ENTRY MODEL

One side of one account inside a JournalEntry. An invoice journal has a
tender debit, a sales credit and, when VAT applies, a VAT credit.
Amounts are positive; the side lives in entry_type.
Rows are written once by the journal engine and never touched again.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from accounting.models.account import Account
from accounting.models.journal import JournalEntry


class LedgerEntry(models.Model):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    ENTRY_TYPES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    journal_entry = models.ForeignKey(JournalEntry, on_delete=models.PROTECT, related_name="ledger_entries")
    account = models.ForeignKey(Account, on_delete=models.PROTECT, related_name="ledger_entries")
    entry_type = models.CharField(max_length=6, choices=ENTRY_TYPES)
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["created_at", "id"]

    @classmethod
    def from_posting(cls, journal_entry: JournalEntry, posting: dict) -> "LedgerEntry":
        """Unsaved row for a normalized posting ({"account", "debit", "credit"})."""
        if posting["debit"] > 0:
            return cls(journal_entry=journal_entry, account=posting["account"], entry_type=cls.DEBIT, amount=posting["debit"])
        return cls(journal_entry=journal_entry, account=posting["account"], entry_type=cls.CREDIT, amount=posting["credit"])

    def __str__(self):
        return f"{self.entry_type} {self.amount} {self.account.code}"

    def clean(self):
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Ledger amount must be > 0")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("Ledger lines cannot be edited once posted")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Ledger lines cannot be deleted")
