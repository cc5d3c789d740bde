from pos.serializers.order import (
    CancelOrderInputSerializer,
    IssueInvoiceInputSerializer,
    OrderSerializer,
    SaveDraftInputSerializer,
    TableStateQuerySerializer,
)

__all__ = [
    "OrderSerializer",
    "SaveDraftInputSerializer",
    "IssueInvoiceInputSerializer",
    "CancelOrderInputSerializer",
    "TableStateQuerySerializer",
]
