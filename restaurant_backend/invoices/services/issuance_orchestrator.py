# invoices/services/issuance_orchestrator.py

"""
INVOICE ISSUANCE ORCHESTRATOR (APPLICATION SERVICE)

Purpose:
- Convert one DRAFT table order into one posted sale Invoice plus its
  balanced journal entry, atomically.

Flow (one DB transaction):
    lock order FOR UPDATE -> state checks -> items from the order's stored
    lines -> number (reserved under the sequence lock, or caller-supplied)
    -> insert Invoice -> order ISSUED + linked -> post to ledger -> attach
    journal entry -> commit

Hard rules:
- The order row lock serializes competing issuances of the same order; the
  loser sees ISSUED + invoice and fails with already_issued.
- Items come ONLY from the order's stored lines. Lines sent with the request
  are ignored.
- When posting is attempted (status "posted" and total > 0), a failed or
  empty ledger result rolls back the invoice and the order update too.
- Every failure leaves the database exactly as it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounting.services.posting import post_invoice_to_ledger
from invoices.models.invoice import Invoice
from invoices.services.numbering import reserve_invoice_number
from pos.models import Order
from pos.services.line_items import (
    LineItemError,
    extract_meta,
    normalize_branch_name,
    normalize_item_lines,
    to_int_id,
    to_number,
    validate_canonical_lines,
)
from pos.services.order_store import OrderNotFound, lock_and_read, mark_issued

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

AUTO_NUMBER_PLACEHOLDER = "auto"


# =====================================================
# ERRORS
# =====================================================

class IssuanceError(Exception):
    """Base issuance exception. `code` is the machine-readable error code."""

    code = "server_error"
    http_status = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class MissingOrderId(IssuanceError):
    code = "missing_order_id"
    http_status = 400


class OrderNotFoundError(IssuanceError):
    code = "not_found"
    http_status = 404


class InvalidOrderState(IssuanceError):
    code = "invalid_state"
    http_status = 409


class AlreadyIssued(IssuanceError):
    code = "already_issued"
    http_status = 409


class EmptyLines(IssuanceError):
    code = "empty_lines"
    http_status = 400


class InvalidLinesError(IssuanceError):
    code = "invalid_lines"
    http_status = 400


class InvalidValuesError(IssuanceError):
    code = "invalid_values"
    http_status = 400


class InvalidJsonError(IssuanceError):
    code = "invalid_json"
    http_status = 400


class DuplicateInvoiceNumber(IssuanceError):
    code = "duplicate_number"
    http_status = 409


class JournalCreationFailed(IssuanceError):
    code = "journal_creation_failed"
    http_status = 500


class IssuanceServerError(IssuanceError):
    code = "server_error"
    http_status = 500


_LINE_ERRORS = {
    "invalid_lines": InvalidLinesError,
    "invalid_values": InvalidValuesError,
    "invalid_json": InvalidJsonError,
}


# =====================================================
# TYPES
# =====================================================

@dataclass
class InvoiceFinancials:
    """Caller-supplied invoice fields. None means "take it from the order"."""

    date: date | str | None = None
    customer_id: int | None = None
    subtotal: Decimal | None = None
    discount_pct: Decimal | None = None
    discount_amount: Decimal | None = None
    tax_pct: Decimal | None = None
    tax_amount: Decimal | None = None
    total: Decimal | None = None
    payment_method: str | None = None
    branch: str | None = None


@dataclass(frozen=True)
class IssuanceResult:
    invoice: Invoice
    journal_entry_id: int | None


# =====================================================
# HELPERS
# =====================================================

def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    try:
        amt = Decimal(str(v))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvalidValuesError(f"Invalid amount: {v!r}") from exc
    if not amt.is_finite():
        raise InvalidValuesError(f"Invalid amount: {v!r}")
    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _coerce_order_id(order_id) -> int:
    if order_id is None or isinstance(order_id, bool):
        raise MissingOrderId("order_id is required to issue an invoice from an order")

    try:
        value = Decimal(str(order_id).strip())
    except (InvalidOperation, ValueError):
        raise MissingOrderId("order_id must be a positive integer") from None

    if not value.is_finite() or value <= 0 or value != value.to_integral_value():
        raise MissingOrderId("order_id must be a positive integer")
    return int(value)


def _is_auto_number(number) -> bool:
    if number is None:
        return True
    text = str(number).strip()
    return not text or text.lower() == AUTO_NUMBER_PLACEHOLDER


def _coerce_date(value) -> date:
    if value is None or value == "":
        return timezone.localdate()
    if isinstance(value, datetime):
        return timezone.localtime(value).date() if timezone.is_aware(value) else value.date()
    if isinstance(value, date):
        return value

    parsed = parse_date(str(value).strip()[:10])
    if parsed is None:
        raise InvalidValuesError(f"Invalid invoice date: {value!r}")
    return parsed


def _posted_at_for(invoice_date: date) -> datetime | None:
    if invoice_date == timezone.localdate():
        return None
    return datetime.combine(invoice_date, time(12, 0))


def _first_set(*values):
    for value in values:
        if value not in (None, ""):
            return value
    return None


def _resolve_financials(*, order: Order, financials: InvoiceFinancials | None, default_branch: str) -> dict:
    fin = financials or InvoiceFinancials()
    meta = extract_meta(order.lines) or {}

    branch = normalize_branch_name(_first_set(fin.branch, order.branch, default_branch))
    payment_method = str(_first_set(fin.payment_method, meta.get("paymentMethod"), "cash")).strip().lower()

    return {
        "date": _coerce_date(fin.date),
        "customer_id": to_int_id(_first_set(fin.customer_id, order.customer_id, meta.get("customerId"))),
        "subtotal": _money(_first_set(fin.subtotal, order.subtotal)),
        "discount_pct": _money(_first_set(fin.discount_pct, to_number(meta.get("discountPct")))),
        "discount_amount": _money(_first_set(fin.discount_amount, order.discount_amount)),
        "tax_pct": _money(_first_set(fin.tax_pct, to_number(meta.get("taxPct")))),
        "tax_amount": _money(_first_set(fin.tax_amount, order.tax_amount)),
        "total": _money(_first_set(fin.total, order.total_amount)),
        "payment_method": payment_method or "cash",
        "branch": branch,
    }


def _normalize_status(status) -> str:
    value = str(status or Invoice.STATUS_POSTED).strip().lower()
    if value not in dict(Invoice.STATUS_CHOICES):
        raise InvalidValuesError(f"Unsupported invoice status: {status!r}")
    return value


def _check_issuable(order: Order) -> None:
    status = (order.status or "").upper()

    if order.invoice_id is not None or status == Order.STATUS_ISSUED:
        raise AlreadyIssued(f"Order {order.pk} already has invoice {order.invoice_id}")

    if status != Order.STATUS_DRAFT:
        raise InvalidOrderState(f"Order status must be DRAFT, got: {order.status}")


def _canonical_items(order: Order) -> list[dict]:
    items = normalize_item_lines(order.lines)
    if not items:
        raise EmptyLines("Order has no items")

    try:
        validate_canonical_lines(items)
    except LineItemError as exc:
        raise _LINE_ERRORS.get(exc.code, InvalidLinesError)(str(exc)) from exc

    return items


def _resolve_number(number) -> str:
    if _is_auto_number(number):
        return reserve_invoice_number()

    number = str(number).strip()
    if Invoice.objects.filter(number=number).exists():
        raise DuplicateInvoiceNumber(f"Invoice number {number} is already used")
    return number


def _insert_invoice(*, number: str, items: list[dict], status: str, fin: dict) -> Invoice:
    try:
        with transaction.atomic():
            return Invoice.objects.create(
                number=number,
                type=Invoice.TYPE_SALE,
                lines=items,
                status=status,
                **fin,
            )
    except IntegrityError as exc:
        if Invoice.objects.filter(number=number).exists():
            raise DuplicateInvoiceNumber(f"Invoice number {number} is already used") from exc
        raise


def _post_to_ledger(*, invoice: Invoice) -> int:
    try:
        journal_entry_id = post_invoice_to_ledger(
            invoice_id=invoice.pk,
            customer_id=invoice.customer_id,
            subtotal=invoice.subtotal,
            discount_amount=invoice.discount_amount,
            tax_amount=invoice.tax_amount,
            total=invoice.total,
            payment_method=invoice.payment_method,
            branch=invoice.branch,
            posted_at=_posted_at_for(invoice.date),
        )
    except Exception as exc:
        raise JournalCreationFailed(f"Ledger posting failed: {exc}") from exc

    if not journal_entry_id:
        raise JournalCreationFailed("Ledger posting returned no journal entry")
    return journal_entry_id


def _should_post(*, status: str, total: Decimal) -> bool:
    if not getattr(settings, "ACCOUNTING_POSTING_ENABLED", True):
        return False
    return status == Invoice.STATUS_POSTED and total > 0


# =====================================================
# ENTRYPOINT
# =====================================================

def _issue_locked(*, order_id, number, financials, status, default_branch, requested_lines) -> IssuanceResult:
    try:
        order = lock_and_read(order_id)
    except OrderNotFound as exc:
        raise OrderNotFoundError(f"Order {order_id} not found") from exc

    _check_issuable(order)

    if requested_lines:
        logger.info("Ignoring request lines; the order's stored lines are authoritative", extra={"order_id": order_id})

    items = _canonical_items(order)
    status = _normalize_status(status)
    fin = _resolve_financials(order=order, financials=financials, default_branch=default_branch)

    invoice = _insert_invoice(number=_resolve_number(number), items=items, status=status, fin=fin)
    mark_issued(order, invoice)

    journal_entry_id = None
    if _should_post(status=status, total=invoice.total):
        journal_entry_id = _post_to_ledger(invoice=invoice)
        invoice.attach_journal_entry(journal_entry_id)

    return IssuanceResult(invoice=invoice, journal_entry_id=journal_entry_id)


def issue_invoice(
    *,
    order_id,
    number=None,
    financials: InvoiceFinancials | None = None,
    status: str = Invoice.STATUS_POSTED,
    default_branch: str,
    requested_lines=None,
) -> IssuanceResult:
    """
    Issue the invoice for a DRAFT order. Raises an IssuanceError subclass on
    any failure; by then the transaction has already been rolled back.
    """
    try:
        order_pk = _coerce_order_id(order_id)
    except MissingOrderId as exc:
        logger.warning("Invoice issuance rejected", extra={"code": exc.code, "reason": exc.message})
        raise

    logger.info("Invoice issuance started", extra={"order_id": order_pk})

    try:
        with transaction.atomic():
            result = _issue_locked(
                order_id=order_pk,
                number=number,
                financials=financials,
                status=status,
                default_branch=default_branch,
                requested_lines=requested_lines,
            )
    except IssuanceError as exc:
        logger.warning(
            "Invoice issuance rejected",
            extra={"order_id": order_pk, "code": exc.code, "reason": exc.message},
        )
        raise
    except Exception as exc:
        logger.exception("Invoice issuance failed", extra={"order_id": order_pk})
        raise IssuanceServerError(str(exc)) from exc

    logger.info(
        "Invoice issued",
        extra={
            "order_id": order_pk,
            "invoice_id": result.invoice.pk,
            "number": result.invoice.number,
            "journal_entry_id": result.journal_entry_id,
        },
    )
    return result
