# invoices/models/invoice.py

"""
======================================================
PATH: invoices/models/invoice.py
======================================================
INVOICE MODEL

Created once by the issuance orchestrator from a locked draft order.

Rules:
- number is unique (INV/<yyyy>/<10-digit sequence> when generated)
- lines holds canonical item lines only and is never empty
- Immutable after creation, except ONE attach of journal_entry
  (null -> id) inside the same issuance transaction
- Never deleted
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import Q
from django.utils import timezone


class Invoice(models.Model):
    TYPE_SALE = "sale"
    TYPE_PURCHASE = "purchase"

    TYPE_CHOICES = [
        (TYPE_SALE, "Sale"),
        (TYPE_PURCHASE, "Purchase"),
    ]

    STATUS_DRAFT = "draft"
    STATUS_POSTED = "posted"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_POSTED, "Posted"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    number = models.CharField(max_length=32, unique=True)
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_SALE)
    date = models.DateField(default=timezone.localdate)

    customer_id = models.PositiveIntegerField(null=True, blank=True)

    lines = models.JSONField(default=list, encoder=DjangoJSONEncoder)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_pct = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_pct = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    payment_method = models.CharField(max_length=32, blank=True, default="cash")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_POSTED)
    branch = models.CharField(max_length=64, blank=True, default="")

    journal_entry = models.ForeignKey(
        "accounting.JournalEntry",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="invoices",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["type", "status"], name="invoice_type_status_idx"),
            models.Index(fields=["branch", "date"], name="invoice_branch_date_idx"),
            models.Index(fields=["customer_id"], name="invoice_customer_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=~Q(number=""), name="chk_invoice_number_not_blank"),
        ]

    def __str__(self):
        return f"{self.number} | {self.total}"

    def clean(self):
        self.number = (self.number or "").strip()
        if not self.number:
            raise ValidationError({"number": "Invoice number is required"})

        if not isinstance(self.lines, list) or not self.lines:
            raise ValidationError({"lines": "Invoice must contain at least one line"})

        for line in self.lines:
            if not isinstance(line, dict) or line.get("type") != "item":
                raise ValidationError({"lines": "Invoice lines must be item lines"})

    def _validate_journal_attach(self, previous: "Invoice", update_fields) -> None:
        if not update_fields or set(update_fields) != {"journal_entry"}:
            raise ValidationError("Invoice is immutable once created; only journal_entry may be attached")

        if previous.journal_entry_id is not None:
            raise ValidationError("Invoice journal entry is already attached")

        if self.journal_entry_id is None:
            raise ValidationError("Cannot attach an empty journal entry")

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous = Invoice.objects.filter(pk=self.pk).first()
            if previous is not None:
                self._validate_journal_attach(previous, kwargs.get("update_fields"))
                return super().save(*args, **kwargs)

        self.clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Invoices cannot be deleted")

    def attach_journal_entry(self, journal_entry_id: int) -> None:
        self.journal_entry_id = journal_entry_id
        self.save(update_fields=["journal_entry"])
