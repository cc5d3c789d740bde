# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Build postings and call create_journal_entry (the engine).

This module should remain a thin adapter:
- It DOES NOT do workflows (the issuance orchestrator does).
- It DOES map business events -> accounting postings.
- It ALWAYS calls create_journal_entry (engine) for immutability + idempotency.

INVOICE POSTING:
    Debit:  Bank / Receivable, otherwise Cash   total
    Credit: Sales revenue (branch, cash|credit)  subtotal - discount
    Credit: VAT payable                     tax

The result is the journal entry id. The engine raises on any failure, so the
caller's transaction rolls back together with the invoice.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from accounting.services.account_resolver import (
    get_accounts_receivable_account,
    get_bank_account,
    get_cash_account,
    get_sales_revenue_account,
    get_vat_payable_account,
)
from accounting.services.exceptions import PostingRuleError
from accounting.services.journal_entry_service import create_journal_entry

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

INVOICE_REFERENCE_TYPE = "INVOICE"

BANK_METHODS = {"card", "bank", "pos", "transfer", "mada"}
CREDIT_METHODS = {"credit"}


def _money(v) -> Decimal:
    if v is None or v == "":
        return Decimal("0.00")
    try:
        amt = Decimal(str(v))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise PostingRuleError(f"Invalid amount: {v!r}") from exc
    if not amt.is_finite():
        raise PostingRuleError(f"Invalid amount: {v!r}")
    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _debit_account_for(payment_method: str | None):
    # split ("multiple") and unrecognised tenders land in the cash box
    method = (payment_method or "cash").strip().lower()
    if method in BANK_METHODS:
        return get_bank_account()
    if method in CREDIT_METHODS:
        return get_accounts_receivable_account()
    return get_cash_account()


def build_invoice_postings(
    *,
    subtotal,
    discount_amount,
    tax_amount,
    total,
    payment_method: str | None,
    branch: str | None,
) -> list[dict]:
    subtotal = _money(subtotal)
    discount = _money(discount_amount)
    tax = _money(tax_amount)
    total = _money(total)

    if total <= 0:
        raise PostingRuleError("Invoice total must be positive to post")

    net_revenue = subtotal - discount
    if net_revenue < 0 or tax < 0:
        raise PostingRuleError("Invoice revenue and tax cannot be negative")
    if net_revenue + tax != total:
        raise PostingRuleError(
            f"Invoice totals do not add up: subtotal={subtotal} discount={discount} tax={tax} total={total}"
        )

    on_credit = (payment_method or "").strip().lower() in CREDIT_METHODS

    postings = [{"account": _debit_account_for(payment_method), "debit": total}]
    if net_revenue > 0:
        postings.append(
            {"account": get_sales_revenue_account(branch=branch, on_credit=on_credit), "credit": net_revenue}
        )
    if tax > 0:
        postings.append({"account": get_vat_payable_account(), "credit": tax})
    return postings


def post_invoice_to_ledger(
    *,
    invoice_id: int,
    customer_id=None,
    subtotal,
    discount_amount,
    tax_amount,
    total,
    payment_method: str | None,
    branch: str | None,
    posted_at=None,
) -> int | None:
    """
    Post a sale invoice to the ledger and return the journal entry id.

    Idempotency: reference INVOICE:<invoice_id> is unique, so a second call
    for the same invoice raises IdempotencyError.
    """
    if not invoice_id:
        raise PostingRuleError("invoice_id is required")

    postings = build_invoice_postings(
        subtotal=subtotal,
        discount_amount=discount_amount,
        tax_amount=tax_amount,
        total=total,
        payment_method=payment_method,
        branch=branch,
    )

    journal_entry = create_journal_entry(
        description=f"invoice #{invoice_id}",
        postings=postings,
        reference_type=INVOICE_REFERENCE_TYPE,
        reference_id=invoice_id,
        posted_at=posted_at,
        branch=branch or "",
    )

    logger.info(
        "Invoice posted to ledger",
        extra={"invoice_id": invoice_id, "customer_id": customer_id, "journal_entry_id": journal_entry.id},
    )
    return journal_entry.id
