# invoices/models/sequence.py

"""
INVOICE SEQUENCE

One row per calendar year holding the last reserved invoice sequence.
The numbering service locks this row (SELECT ... FOR UPDATE) inside the
issuance transaction, so two issuances never reserve the same value.
"""

from django.db import models


class InvoiceSequence(models.Model):
    year = models.PositiveIntegerField(unique=True)
    last_value = models.PositiveBigIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-year"]
        verbose_name = "Invoice Sequence"
        verbose_name_plural = "Invoice Sequences"

    def __str__(self):
        return f"{self.year}: {self.last_value}"
