# invoices/services/numbering.py

"""
======================================================
PATH: invoices/services/numbering.py
======================================================
INVOICE NUMBERING

Format: INV/<yyyy>/<10-digit zero-padded sequence>, e.g. INV/2024/0000000008

- next_invoice_number() is pure: latest number + year -> next number.
  A different year, a missing number or a malformed one restarts at 1.
- reserve_invoice_number() runs inside the issuance transaction. It locks the
  per-year InvoiceSequence row, so two concurrent issuances serialize here and
  never compute the same value. Invoice.number is unique on top of that.
- peek_next_invoice_number() answers "what would the next number be?" for
  display only. It reserves nothing.
"""

from __future__ import annotations

import logging
import re

from django.db import IntegrityError, transaction
from django.utils import timezone

from invoices.models.invoice import Invoice
from invoices.models.sequence import InvoiceSequence

logger = logging.getLogger(__name__)

PREFIX = "INV"
SEQUENCE_WIDTH = 10

_NUMBER_RE = re.compile(r"^INV/(\d{4})/(\d+)$")


def format_invoice_number(year: int, sequence: int) -> str:
    return f"{PREFIX}/{int(year):04d}/{int(sequence):0{SEQUENCE_WIDTH}d}"


def parse_invoice_number(number: str | None) -> tuple[int, int] | None:
    """Return (year, sequence) for a well-formed number, else None."""
    if not isinstance(number, str):
        return None

    match = _NUMBER_RE.match(number.strip())
    if not match:
        return None

    return int(match.group(1)), int(match.group(2))


def next_invoice_number(latest: str | None, *, year: int) -> str:
    parsed = parse_invoice_number(latest)
    if parsed is not None:
        latest_year, latest_seq = parsed
        if latest_year == year and latest_seq > 0:
            return format_invoice_number(year, latest_seq + 1)

    return format_invoice_number(year, 1)


def _current_year() -> int:
    return timezone.localdate().year


def latest_invoice_number(year: int) -> str | None:
    """
    Latest well-formed number issued in `year`.
    Numbers not matching the fixed-width pattern are ignored, so a malformed
    manual number never drags the sequence back to 1.
    """
    return (
        Invoice.objects.filter(number__regex=rf"^{PREFIX}/{int(year):04d}/[0-9]{{{SEQUENCE_WIDTH}}}$")
        .order_by("-number")
        .values_list("number", flat=True)
        .first()
    )


def _sequence_value(number: str) -> int:
    parsed = parse_invoice_number(number)
    return parsed[1] if parsed else 1


def _lock_sequence_row(year: int) -> InvoiceSequence:
    row = InvoiceSequence.objects.select_for_update().filter(year=year).first()
    if row is not None:
        return row

    try:
        with transaction.atomic():
            return InvoiceSequence.objects.create(year=year, last_value=0)
    except IntegrityError:
        # created concurrently; wait for and lock that row
        logger.debug("Invoice sequence row created concurrently", extra={"year": year})
        return InvoiceSequence.objects.select_for_update().get(year=year)


@transaction.atomic
def reserve_invoice_number(*, year: int | None = None) -> str:
    year = year or _current_year()

    row = _lock_sequence_row(year)
    from_latest = _sequence_value(next_invoice_number(latest_invoice_number(year), year=year))
    value = max(from_latest, row.last_value + 1)

    row.last_value = value
    row.save(update_fields=["last_value", "updated_at"])

    number = format_invoice_number(year, value)
    logger.debug("Invoice number reserved", extra={"year": year, "number": number})
    return number


def peek_next_invoice_number(*, year: int | None = None) -> str:
    year = year or _current_year()

    last_reserved = (
        InvoiceSequence.objects.filter(year=year).values_list("last_value", flat=True).first() or 0
    )
    from_latest = _sequence_value(next_invoice_number(latest_invoice_number(year), year=year))
    return format_invoice_number(year, max(from_latest, last_reserved + 1))
