"""
PATH: pos/services/draft_service.py

DRAFT SAVE PATH

Purpose:
- Create or update a table's DRAFT order from the POS screen payload.
- Recompute totals server-side and store them on the order and on the
  single meta line.
- Report busy tables (tables with a DRAFT order) per branch.
- Cancel a DRAFT order (optionally password-gated).

Hard rules:
- Branch and table are required.
- An order can be edited or cancelled only while DRAFT; the update runs
  under the same row lock issuance uses, so a draft save can never
  overwrite an order that is being issued.
- Default branch and tax percentage are explicit arguments (resolved by the
  caller from settings), never read from the request user.
"""

from __future__ import annotations

import logging

from django.conf import settings
from django.db import transaction
from django.db.models import Q

from pos.models import Order
from pos.services.line_items import (
    META,
    compute_totals,
    decode_lines,
    normalize_branch_name,
    normalize_item_lines,
    to_int_id,
    to_number,
)
from pos.services.order_store import InvalidTransition, OrderNotFound, lock_and_read, mark_cancelled

logger = logging.getLogger(__name__)


# =====================================================
# ERRORS
# =====================================================

class DraftError(Exception):
    code = "draft_error"
    http_status = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)
        self.message = message or self.code


class InvalidBranch(DraftError):
    code = "invalid_branch"


class InvalidTable(DraftError):
    code = "invalid_table"


class DraftNotFound(DraftError):
    code = "not_found"
    http_status = 404


class DraftNotEditable(DraftError):
    code = "invalid_state"
    http_status = 409


class InvalidCancelPassword(DraftError):
    code = "invalid_password"
    http_status = 403


# =====================================================
# HELPERS
# =====================================================

def _pick(payload: dict, *keys, default=None):
    for key in keys:
        value = payload.get(key)
        if value not in (None, ""):
            return value
    return default


def _raw_lines(payload: dict):
    lines = payload.get("lines")
    if lines not in (None, "", []):
        return lines
    return payload.get("items") or []


def _build_meta(*, branch, table, payload, discount_pct, tax_pct, totals) -> dict:
    pay_lines = payload.get("payLines")
    return {
        "type": META,
        "branch": branch,
        "table": table,
        "customer_name": str(_pick(payload, "customerName", "customer_name", default="")),
        "customer_phone": str(_pick(payload, "customerPhone", "customer_phone", default="")),
        "customerId": to_int_id(_pick(payload, "customerId", "customer_id")),
        "discountPct": discount_pct,
        "taxPct": tax_pct,
        "paymentMethod": str(_pick(payload, "paymentMethod", "payment_method", default="")),
        "payLines": pay_lines if isinstance(pay_lines, list) else [],
        "subtotal": float(totals.subtotal),
        "discount_amount": float(totals.discount_amount),
        "tax_amount": float(totals.tax_amount),
        "total_amount": float(totals.total),
    }


# =====================================================
# OPERATIONS
# =====================================================

def save_draft(*, payload: dict, default_branch: str, default_tax_pct=15) -> Order:
    payload = payload or {}

    branch = normalize_branch_name(_pick(payload, "branch", default=default_branch))
    if not branch:
        raise InvalidBranch("Branch is required")

    table = str(_pick(payload, "table", "table_code", "tableId", default="")).strip()
    if not table:
        raise InvalidTable("Table is required")

    items = normalize_item_lines(decode_lines(_raw_lines(payload)))

    discount_pct = to_number(_pick(payload, "discountPct", "discount_pct", default=0))
    tax_pct = to_number(_pick(payload, "taxPct", "tax_pct", default=default_tax_pct))
    totals = compute_totals(items, discount_pct=discount_pct, tax_pct=tax_pct)

    meta = _build_meta(
        branch=branch,
        table=table,
        payload=payload,
        discount_pct=discount_pct,
        tax_pct=tax_pct,
        totals=totals,
    )
    lines = [meta, *items]

    fields = {
        "lines": lines,
        "subtotal": totals.subtotal,
        "discount_amount": totals.discount_amount,
        "tax_amount": totals.tax_amount,
        "total_amount": totals.total,
        "customer_id": meta["customerId"],
        "customer_name": meta["customer_name"],
        "customer_phone": meta["customer_phone"],
    }

    order_id = to_int_id(payload.get("order_id"))
    if not order_id:
        order = Order.objects.create(branch=branch, table_code=table, status=Order.STATUS_DRAFT, **fields)
        logger.info(
            "Draft order created",
            extra={"order_id": order.pk, "branch": branch, "table": table, "items": len(items)},
        )
        return order

    with transaction.atomic():
        try:
            order = lock_and_read(order_id)
        except OrderNotFound as exc:
            raise DraftNotFound(f"Order {order_id} not found") from exc

        if not order.is_draft:
            raise DraftNotEditable(f"Order {order_id} is {order.status} and cannot be edited")

        for name, value in fields.items():
            setattr(order, name, value)
        order.save(update_fields=[*fields.keys(), "updated_at"])

    logger.info("Draft order updated", extra={"order_id": order.pk, "items": len(items)})
    return order


def cancel_draft(*, order_id: int, password: str | None = None) -> Order:
    expected = getattr(settings, "POS_CANCEL_PASSWORD", "") or ""
    if expected and (password or "") != expected:
        logger.warning("Draft cancel rejected: wrong password", extra={"order_id": order_id})
        raise InvalidCancelPassword("Cancel password is incorrect")

    with transaction.atomic():
        try:
            order = lock_and_read(order_id)
        except OrderNotFound as exc:
            raise DraftNotFound(f"Order {order_id} not found") from exc

        try:
            return mark_cancelled(order)
        except InvalidTransition as exc:
            raise DraftNotEditable(str(exc)) from exc


def busy_tables(*, branch: str) -> list[str]:
    raw = str(branch or "").strip()
    if not raw:
        return []

    normalized = normalize_branch_name(raw)
    codes = (
        Order.objects.filter(Q(branch=raw) | Q(branch=normalized), status=Order.STATUS_DRAFT)
        .order_by("table_code")
        .values_list("table_code", flat=True)
    )
    return list(dict.fromkeys(code for code in codes if code))

