"""
PATH: pos/serializers/order.py

Read serializer for table orders plus the POS input serializers
(used for validation and Swagger docs).
"""

from rest_framework import serializers

from invoices.models import Invoice
from pos.models import Order
from pos.services.line_items import extract_meta, normalize_item_lines


class OrderSerializer(serializers.ModelSerializer):
    """
    Table order with its lines split into `meta` and canonical `items`.
    """

    order_id = serializers.IntegerField(source="id", read_only=True)
    items = serializers.SerializerMethodField()
    meta = serializers.SerializerMethodField()
    invoice_number = serializers.CharField(source="invoice.number", read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_id",
            "branch",
            "table_code",
            "status",
            "lines",
            "items",
            "meta",
            "subtotal",
            "discount_amount",
            "tax_amount",
            "total_amount",
            "customer_id",
            "customer_name",
            "customer_phone",
            "invoice",
            "invoice_number",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_items(self, obj):
        return normalize_item_lines(obj.lines)

    def get_meta(self, obj):
        return extract_meta(obj.lines) or {}


# =====================================================
# INPUT SERIALIZERS
# =====================================================

class SaveDraftInputSerializer(serializers.Serializer):
    """
    Documents the draft payload. The POS screen sends mixed key styles
    (camelCase and snake_case); the draft service reads both.
    """

    order_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    branch = serializers.CharField(required=False, allow_blank=True)
    table = serializers.CharField(required=False, allow_blank=True)
    lines = serializers.JSONField(required=False)
    items = serializers.JSONField(required=False)
    discountPct = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    taxPct = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    customerName = serializers.CharField(required=False, allow_blank=True)
    customerPhone = serializers.CharField(required=False, allow_blank=True)
    customerId = serializers.IntegerField(required=False, allow_null=True)
    paymentMethod = serializers.CharField(required=False, allow_blank=True)
    payLines = serializers.ListField(child=serializers.JSONField(), required=False)


class IssueInvoiceInputSerializer(serializers.Serializer):
    # kept as text so a missing/invalid id maps to missing_order_id, not a field error
    order_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    number = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    date = serializers.DateField(required=False, allow_null=True)
    customer_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    discount_pct = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    discount_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    tax_pct = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    tax_amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    total = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    payment_method = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    branch = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    status = serializers.ChoiceField(
        choices=[c[0] for c in Invoice.STATUS_CHOICES],
        required=False,
        default=Invoice.STATUS_POSTED,
    )
    lines = serializers.JSONField(required=False)


class CancelOrderInputSerializer(serializers.Serializer):
    password = serializers.CharField(required=False, allow_blank=True, default="")


class TableStateQuerySerializer(serializers.Serializer):
    branch = serializers.CharField(required=False, allow_blank=True)
