# pos/views/api.py

"""
POS API VIEWS

Purpose:
- Draft save (create/update a table's DRAFT order)
- Table state (busy tables per branch)
- Order read + draft cancellation
- Invoice issuance (DRAFT order -> posted invoice + journal entry)

Hard rules:
- Money is server-owned: draft totals are recomputed, issuance reads the
  order's stored lines and totals.
- Default branch / tax come from settings and are passed explicitly into
  the services.
- Domain errors are returned as {"error": {"code", "message"}}.
"""

from __future__ import annotations

from django.conf import settings
from django.shortcuts import get_object_or_404
from drf_spectacular.utils import OpenApiExample, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from invoices.api.serializers import InvoiceSerializer
from invoices.services.issuance_orchestrator import IssuanceError, InvoiceFinancials, issue_invoice
from pos.models import Order
from pos.serializers import (
    CancelOrderInputSerializer,
    IssueInvoiceInputSerializer,
    OrderSerializer,
    SaveDraftInputSerializer,
    TableStateQuerySerializer,
)
from pos.services.draft_service import DraftError, busy_tables, cancel_draft, save_draft


# =====================================================
# API ERROR NORMALIZATION
# =====================================================

def error_response(*, code: str, message: str, http_status: int):
    return Response(
        {"error": {"code": code, "message": message}},
        status=http_status,
    )


def _validation_error_response(serializer):
    return error_response(
        code="invalid_values",
        message=str(serializer.errors),
        http_status=status.HTTP_400_BAD_REQUEST,
    )


def _payload(request) -> dict:
    return request.data if isinstance(request.data, dict) else {}


# =====================================================
# DRAFTS
# =====================================================

class SaveDraftView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["POS"],
        request=SaveDraftInputSerializer,
        responses={200: OrderSerializer, 201: OrderSerializer},
        examples=[
            OpenApiExample(
                "New draft",
                value={
                    "branch": "china_town",
                    "table": "5",
                    "items": [{"id": 7, "name": "Chicken Tikka", "qty": 2, "price": 25}],
                    "discountPct": 0,
                    "taxPct": 15,
                },
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = SaveDraftInputSerializer(data=_payload(request))
        if not serializer.is_valid():
            return _validation_error_response(serializer)

        payload = _payload(request)
        try:
            order = save_draft(
                payload=payload,
                default_branch=settings.POS_DEFAULT_BRANCH,
                default_tax_pct=settings.POS_DEFAULT_TAX_PCT,
            )
        except DraftError as exc:
            return error_response(code=exc.code, message=exc.message, http_status=exc.http_status)

        http_status = status.HTTP_200_OK if payload.get("order_id") else status.HTTP_201_CREATED
        return Response(OrderSerializer(order).data, status=http_status)


class TableStateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["POS"],
        parameters=[TableStateQuerySerializer],
        responses={200: dict},
    )
    def get(self, request):
        query = TableStateQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return _validation_error_response(query)

        branch = query.validated_data.get("branch") or settings.POS_DEFAULT_BRANCH
        return Response({"busy": busy_tables(branch=branch)}, status=status.HTTP_200_OK)


class OrderDetailView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["POS"], responses={200: OrderSerializer})
    def get(self, request, order_id: int):
        order = get_object_or_404(Order.objects.select_related("invoice"), pk=order_id)
        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


class CancelOrderView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["POS"], request=CancelOrderInputSerializer, responses={200: OrderSerializer})
    def post(self, request, order_id: int):
        serializer = CancelOrderInputSerializer(data=_payload(request))
        if not serializer.is_valid():
            return _validation_error_response(serializer)

        try:
            order = cancel_draft(order_id=order_id, password=serializer.validated_data.get("password"))
        except DraftError as exc:
            return error_response(code=exc.code, message=exc.message, http_status=exc.http_status)

        return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)


# =====================================================
# ISSUANCE
# =====================================================

class IssueInvoiceView(APIView):
    """
    POST /api/pos/issue-invoice/

    Converts a DRAFT order into a posted sale invoice (+ journal entry).
    Lines sent in the body are ignored; the order's stored lines are used.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["POS"],
        request=IssueInvoiceInputSerializer,
        responses={201: InvoiceSerializer},
        examples=[
            OpenApiExample(
                "Issue with auto number",
                value={"order_id": 42, "number": "Auto", "payment_method": "cash"},
                request_only=True,
            )
        ],
    )
    def post(self, request):
        serializer = IssueInvoiceInputSerializer(data=_payload(request))
        if not serializer.is_valid():
            return _validation_error_response(serializer)

        data = serializer.validated_data
        financials = InvoiceFinancials(
            date=data.get("date"),
            customer_id=data.get("customer_id"),
            subtotal=data.get("subtotal"),
            discount_pct=data.get("discount_pct"),
            discount_amount=data.get("discount_amount"),
            tax_pct=data.get("tax_pct"),
            tax_amount=data.get("tax_amount"),
            total=data.get("total"),
            payment_method=data.get("payment_method") or None,
            branch=data.get("branch") or None,
        )

        try:
            result = issue_invoice(
                order_id=data.get("order_id"),
                number=data.get("number"),
                financials=financials,
                status=data.get("status"),
                default_branch=settings.POS_DEFAULT_BRANCH,
                requested_lines=data.get("lines"),
            )
        except IssuanceError as exc:
            return error_response(code=exc.code, message=exc.message, http_status=exc.http_status)

        body = InvoiceSerializer(result.invoice).data
        body["journal_entry_id"] = result.journal_entry_id
        return Response(body, status=status.HTTP_201_CREATED)
