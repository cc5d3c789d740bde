# invoices/models/__init__.py

from invoices.models.invoice import Invoice
from invoices.models.sequence import InvoiceSequence

__all__ = [
    "Invoice",
    "InvoiceSequence",
]
