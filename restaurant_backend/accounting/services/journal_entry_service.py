# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

The ONLY place allowed to:
- Create JournalEntry / LedgerEntry rows
- Enforce debit == credit
- Enforce idempotency via reference (no double-posting of one invoice)
- Enforce period locks

Runs in its own atomic block; when called inside an outer transaction
(invoice issuance) it becomes a savepoint, so a failure here propagates
and the caller's rollback removes everything.

period_lock is imported lazily to keep model loading free of service imports.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MIN_LINE_AMOUNT = Decimal("0.01")


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise JournalEntryCreationError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _as_aware_dt(dt: datetime | None) -> datetime:
    if dt is None:
        return timezone.now()
    if timezone.is_naive(dt):
        return timezone.make_aware(dt, timezone.get_current_timezone())
    return dt


def build_reference(reference_type: str | None, reference_id) -> str | None:
    if not reference_type or reference_id in (None, ""):
        return None

    rt = str(reference_type).strip().upper()
    rid = str(reference_id).strip()
    if not rt or not rid:
        return None

    return f"{rt}:{rid}"


def _chart_of(normalized_postings: list[dict]):
    chart_id = normalized_postings[0]["account"].chart_id
    if chart_id is None:
        raise JournalEntryCreationError("Posting accounts must belong to a chart")

    for line in normalized_postings[1:]:
        if line["account"].chart_id != chart_id:
            raise JournalEntryCreationError(
                "All postings must belong to the same chart. Cross-chart journal entries are not allowed."
            )

    return normalized_postings[0]["account"].chart


def _enforce_period_lock(*, chart, posted_at: datetime) -> None:
    from accounting.services.period_lock import PeriodLockedError, assert_period_open

    try:
        assert_period_open(chart=chart, posted_at=posted_at)
    except PeriodLockedError as exc:
        raise JournalEntryCreationError(str(exc)) from exc


def _normalize_postings(postings: list) -> list[dict]:
    normalized: list[dict] = []

    for line in postings:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each posting must be a dict")

        account = line.get("account")
        if account is None:
            raise JournalEntryCreationError("Posting missing account")

        if not getattr(account, "is_active", True):
            raise JournalEntryCreationError(f"Account {account.code} is inactive")

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")
        if debit > 0 and credit > 0:
            raise JournalEntryCreationError("A posting cannot have both debit and credit")
        if debit == 0 and credit == 0:
            raise JournalEntryCreationError("A posting must have either debit or credit")
        if 0 < debit < MIN_LINE_AMOUNT or 0 < credit < MIN_LINE_AMOUNT:
            raise JournalEntryCreationError("Posting amount too small")

        normalized.append({"account": account, "debit": debit, "credit": credit})

    return normalized


@transaction.atomic
def create_journal_entry(
    *,
    description: str,
    postings: list,
    reference_type: str | None = None,
    reference_id=None,
    posted_at: datetime | None = None,
    branch: str = "",
) -> JournalEntry:
    if not postings:
        raise JournalEntryCreationError("Journal entry must contain at least one posting")

    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    reference = build_reference(reference_type, reference_id)
    normalized_postings = _normalize_postings(postings)

    total_debits = sum((p["debit"] for p in normalized_postings), Decimal("0.00"))
    total_credits = sum((p["credit"] for p in normalized_postings), Decimal("0.00"))

    if total_debits != total_credits:
        raise JournalEntryCreationError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )

    chart = _chart_of(normalized_postings)
    posted_at_dt = _as_aware_dt(posted_at)
    _enforce_period_lock(chart=chart, posted_at=posted_at_dt)

    if reference and JournalEntry.objects.filter(reference=reference).exists():
        raise IdempotencyError(f"Journal entry already exists for reference {reference}")

    try:
        with transaction.atomic():
            journal_entry = JournalEntry.objects.create(
                description=description,
                reference=reference,
                posted_at=posted_at_dt,
                branch=(branch or "").strip(),
                is_posted=True,
            )
    except (IntegrityError, ValidationError) as exc:
        if reference and JournalEntry.objects.filter(reference=reference).exists():
            raise IdempotencyError(f"Journal entry already exists for reference {reference}") from exc
        raise JournalEntryCreationError(f"Failed to create journal entry: {exc}") from exc

    ledger_entries = [LedgerEntry.from_posting(journal_entry, line) for line in normalized_postings]
    LedgerEntry.objects.bulk_create(ledger_entries)

    logger.info(
        "Journal entry created",
        extra={"journal_entry_id": journal_entry.id, "reference": reference, "lines": len(ledger_entries)},
    )
    return journal_entry
