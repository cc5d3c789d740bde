# pos/models/__init__.py

from pos.models.order import Order

__all__ = [
    "Order",
]
