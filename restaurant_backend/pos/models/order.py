"""
PATH: pos/models/order.py

TABLE ORDER MODEL

Purpose:
- Mutable draft order for one table of one branch.
- Holds the raw line payload (one meta line + item lines) as JSON.
- Linked to exactly one Invoice once issued.

Lifecycle:
    DRAFT -> ISSUED     (issuance orchestrator, exactly once)
    DRAFT -> CANCELLED  (cancel flow)
ISSUED and CANCELLED are terminal.

Rules:
- invoice set  => status ISSUED
- status DRAFT => invoice is null
- status ISSUED => invoice set
- Never deleted while linked to an invoice (PROTECT).
"""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import Q


class Order(models.Model):
    STATUS_DRAFT = "DRAFT"
    STATUS_ISSUED = "ISSUED"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_ISSUED, "Issued"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    branch = models.CharField(max_length=64, db_index=True)
    table_code = models.CharField(max_length=32)

    lines = models.JSONField(default=list, blank=True, encoder=DjangoJSONEncoder)

    status = models.CharField(
        max_length=16,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
        db_index=True,
    )

    invoice = models.OneToOneField(
        "invoices.Invoice",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="order",
    )

    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    customer_id = models.PositiveIntegerField(null=True, blank=True)
    customer_name = models.CharField(max_length=150, blank=True, default="")
    customer_phone = models.CharField(max_length=32, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]
        indexes = [
            models.Index(fields=["branch", "status"], name="order_branch_status_idx"),
            models.Index(fields=["branch", "table_code"], name="order_branch_table_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    Q(status="DRAFT", invoice__isnull=True)
                    | Q(status="ISSUED", invoice__isnull=False)
                    | Q(status="CANCELLED", invoice__isnull=True)
                ),
                name="chk_order_status_matches_invoice",
            ),
        ]

    def __str__(self):
        return f"Order #{self.pk} {self.branch}/{self.table_code} ({self.status})"

    @property
    def is_draft(self) -> bool:
        return (self.status or "").upper() == self.STATUS_DRAFT

    def clean(self):
        self.branch = (self.branch or "").strip()
        self.table_code = (self.table_code or "").strip()

        if not self.branch:
            raise ValidationError({"branch": "branch is required"})
        if not self.table_code:
            raise ValidationError({"table_code": "table is required"})

        if self.invoice_id is not None and self.status != self.STATUS_ISSUED:
            raise ValidationError("An order linked to an invoice must be ISSUED")
        if self.status == self.STATUS_ISSUED and self.invoice_id is None:
            raise ValidationError("An ISSUED order must be linked to an invoice")

    def save(self, *args, **kwargs):
        self.clean()
        return super().save(*args, **kwargs)
