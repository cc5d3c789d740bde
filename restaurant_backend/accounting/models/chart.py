# accounting/models/chart.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models, transaction


class ChartOfAccounts(models.Model):
    """
    A restaurant Chart of Accounts.

    Rules:
    - Only ONE chart can be active at a time (the resolver posts into it).
    - `code` is the stable key used by resolvers and the seed command;
      `name` is a human label and may be edited freely.
    """

    BUSINESS_RESTAURANT = "restaurant"
    BUSINESS_CAFE = "cafe"

    BUSINESS_TYPE_CHOICES = [
        (BUSINESS_RESTAURANT, "Restaurant"),
        (BUSINESS_CAFE, "Cafe"),
    ]

    name = models.CharField(max_length=100, unique=True)

    code = models.SlugField(
        max_length=64,
        unique=True,
        help_text="Stable chart key used by resolvers/seeders. Do not change after go-live.",
    )

    business_type = models.CharField(
        max_length=32,
        choices=BUSINESS_TYPE_CHOICES,
        default=BUSINESS_RESTAURANT,
        db_index=True,
    )

    is_active = models.BooleanField(default=False, db_index=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Chart of Accounts"
        verbose_name_plural = "Charts of Accounts"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.business_type or 'unknown'})"

    def clean(self):
        self.name = (self.name or "").strip()
        self.code = (self.code or "").strip()

        if not self.name:
            raise ValidationError({"name": "name is required"})
        if not self.code:
            raise ValidationError({"code": "code is required"})

    def save(self, *args, **kwargs):
        """
        Deactivate every other chart when this one is activated,
        and drop the resolver cache whenever the active chart may have changed.
        """
        self.full_clean()

        from accounting.services.account_resolver import clear_active_chart_cache

        with transaction.atomic():
            was_active = False
            if self.pk:
                was_active = bool(
                    ChartOfAccounts.objects.filter(pk=self.pk)
                    .values_list("is_active", flat=True)
                    .first()
                )

            if self.is_active:
                ChartOfAccounts.objects.exclude(pk=self.pk).update(is_active=False)

            super().save(*args, **kwargs)

        if self.is_active or was_active:
            clear_active_chart_cache()
