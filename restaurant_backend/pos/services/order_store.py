"""
PATH: pos/services/order_store.py

ORDER STORE

The only place that reads an order FOR UPDATE and moves it through its
lifecycle. Callers must already be inside transaction.atomic(); the row
lock is held until that transaction commits or rolls back.
"""

from __future__ import annotations

import logging

from pos.models import Order

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    Order.STATUS_DRAFT: {Order.STATUS_ISSUED, Order.STATUS_CANCELLED},
    Order.STATUS_ISSUED: set(),
    Order.STATUS_CANCELLED: set(),
}

TERMINAL_STATES = {Order.STATUS_ISSUED, Order.STATUS_CANCELLED}


class OrderStoreError(Exception):
    pass


class OrderNotFound(OrderStoreError):
    pass


class InvalidTransition(OrderStoreError):
    pass


def validate_transition(current: str, target: str) -> None:
    current = (current or "").upper()
    if target not in ALLOWED_TRANSITIONS.get(current, set()):
        raise InvalidTransition(f"Order cannot move from {current or 'UNKNOWN'} to {target}")


def lock_and_read(order_id: int) -> Order:
    """SELECT ... FOR UPDATE on one order; blocks competing writers."""
    order = Order.objects.select_for_update().filter(pk=order_id).first()
    if order is None:
        raise OrderNotFound(f"Order {order_id} not found")
    return order


def mark_issued(order: Order, invoice) -> Order:
    validate_transition(order.status, Order.STATUS_ISSUED)

    order.status = Order.STATUS_ISSUED
    order.invoice = invoice
    order.save(update_fields=["status", "invoice", "updated_at"])

    logger.info("Order issued", extra={"order_id": order.pk, "invoice_id": invoice.pk})
    return order


def mark_cancelled(order: Order) -> Order:
    validate_transition(order.status, Order.STATUS_CANCELLED)

    order.status = Order.STATUS_CANCELLED
    order.save(update_fields=["status", "updated_at"])

    logger.info("Order cancelled", extra={"order_id": order.pk})
    return order
