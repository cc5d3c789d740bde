# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q

from accounting.models.chart import ChartOfAccounts


class AccountQuerySet(models.QuerySet):
    def postable(self, chart: ChartOfAccounts):
        return self.filter(chart=chart, is_active=True)


class Account(models.Model):
    """
    A postable account inside the restaurant Chart of Accounts.

    Invoice posting only ever touches three kinds: the tender accounts
    (1111 cash box, 1121 bank, 1141 receivable), 2141 output VAT and the
    per-branch sales accounts (41x1 cash sales, 41x2 credit sales).
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    REVENUE = "REVENUE"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (REVENUE, "Revenue"),
    ]

    chart = models.ForeignKey(
        ChartOfAccounts,
        on_delete=models.PROTECT,
        related_name="accounts",
    )

    code = models.CharField(max_length=10)
    name = models.CharField(max_length=150)
    account_type = models.CharField(max_length=20, choices=ACCOUNT_TYPES)

    # inactive accounts stay on old ledger lines but refuse new postings
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AccountQuerySet.as_manager()

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(fields=["chart", "code"], name="uniq_account_chart_code"),
            models.CheckConstraint(condition=~Q(code=""), name="chk_account_code_not_blank"),
        ]

    def __str__(self):
        return f"{self.code} {self.name}"

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code.isdigit():
            raise ValidationError({"code": "Account code must be numeric, e.g. 1111"})
        if not self.name:
            raise ValidationError({"name": "Account name is required"})

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)
