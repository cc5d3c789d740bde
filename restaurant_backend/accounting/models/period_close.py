# accounting/models/period_close.py

"""
PERIOD CLOSE MODEL

A closed (locked) accounting date range for a chart. Nothing may be
posted with a posted_at date inside a closed range.

Rules:
- Immutable once created, never deleted.
- Ranges of one chart never overlap.
- closing_entry is optional: a period can be locked before the closing
  journal is booked.
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q

from accounting.models.chart import ChartOfAccounts
from accounting.models.journal import JournalEntry


class PeriodClose(models.Model):
    chart = models.ForeignKey(
        ChartOfAccounts,
        on_delete=models.PROTECT,
        related_name="period_closes",
    )

    start_date = models.DateField()
    end_date = models.DateField()

    closing_entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="period_closes",
    )

    note = models.CharField(max_length=255, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-end_date", "-created_at"]
        indexes = [
            models.Index(fields=["chart", "start_date", "end_date"], name="period_close_range_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["chart", "start_date", "end_date"],
                name="uniq_period_close_chart_start_end",
            ),
            models.CheckConstraint(
                condition=Q(end_date__gte=F("start_date")),
                name="chk_period_close_end_gte_start",
            ),
        ]
        verbose_name = "Period Close"
        verbose_name_plural = "Period Closes"

    def __str__(self):
        return f"PeriodClose {self.start_date} → {self.end_date} ({getattr(self.chart, 'name', 'Chart')})"

    def clean(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "end_date must be >= start_date"})

        if self.chart_id and self.start_date and self.end_date:
            overlapping = PeriodClose.objects.filter(
                chart_id=self.chart_id,
                start_date__lte=self.end_date,
                end_date__gte=self.start_date,
            )
            if self.pk:
                overlapping = overlapping.exclude(pk=self.pk)

            if overlapping.exists():
                raise ValidationError("This period overlaps an existing closed period for this chart.")

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("PeriodClose records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("PeriodClose records are immutable and cannot be deleted")
