# invoices/api/viewsets.py

"""
======================================================
PATH: invoices/api/viewsets.py
======================================================
INVOICE VIEWSET (READ-ONLY)

- List + retrieve invoices with filters (type, status, branch, customer_id).
- next-number: the number the next auto-numbered issuance would get.
  Display only; nothing is reserved.

Invoices are created only by the issuance endpoint (/api/pos/issue-invoice/).
"""

from __future__ import annotations

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from invoices.api.serializers import InvoiceSerializer, NextInvoiceNumberSerializer
from invoices.models import Invoice
from invoices.services.numbering import peek_next_invoice_number


@extend_schema(tags=["invoices"])
class InvoiceViewSet(viewsets.ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = InvoiceSerializer
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    filterset_fields = ["type", "status", "branch", "customer_id", "date"]
    search_fields = ["number"]
    ordering_fields = ["created_at", "date", "number", "total"]
    ordering = ["-created_at"]

    queryset = Invoice.objects.select_related("order")

    @extend_schema(responses={200: NextInvoiceNumberSerializer})
    @action(detail=False, methods=["get"], url_path="next-number")
    def next_number(self, request):
        return Response({"next": peek_next_invoice_number()})
