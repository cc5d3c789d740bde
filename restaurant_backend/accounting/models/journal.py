# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Header of one balanced accounting transaction (e.g. one issued invoice).

Guarantees:
- Immutable once created (no updates, no deletes)
- Idempotency via reference uniqueness ("INVOICE:<id>")
- posted_at is the accounting effective date (used by period locks)
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class JournalEntry(models.Model):
    reference = models.CharField(
        max_length=100,
        blank=True,
        null=True,
        help_text="Source document reference, e.g. INVOICE:42",
    )

    description = models.TextField()

    branch = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text="Restaurant branch the entry belongs to",
    )

    posted_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    is_posted = models.BooleanField(default=True)

    class Meta:
        ordering = ["-posted_at", "-created_at"]
        indexes = [
            models.Index(fields=["posted_at"], name="journal_posted_at_idx"),
            models.Index(fields=["reference"], name="journal_reference_idx"),
            models.Index(fields=["branch"], name="journal_branch_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["reference"],
                condition=Q(reference__isnull=False) & ~Q(reference=""),
                name="uniq_journal_reference_not_blank",
            )
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry #{self.id} ({self.reference or 'no ref'})"

    def clean(self):
        if self.reference is not None:
            self.reference = str(self.reference).strip() or None

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

        if self.posted_at and timezone.is_naive(self.posted_at):
            self.posted_at = timezone.make_aware(self.posted_at, timezone.get_current_timezone())

    def save(self, *args, **kwargs):
        if self.pk:
            raise ValidationError("JournalEntry records are immutable once created")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records are immutable and cannot be deleted")
