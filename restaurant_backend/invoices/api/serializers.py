# invoices/api/serializers.py

from rest_framework import serializers

from invoices.models import Invoice


class InvoiceSerializer(serializers.ModelSerializer):
    order_id = serializers.SerializerMethodField()

    class Meta:
        model = Invoice
        fields = [
            "id",
            "number",
            "type",
            "date",
            "status",
            "branch",
            "customer_id",
            "lines",
            "subtotal",
            "discount_pct",
            "discount_amount",
            "tax_pct",
            "tax_amount",
            "total",
            "payment_method",
            "journal_entry",
            "order_id",
            "created_at",
        ]
        read_only_fields = fields

    def get_order_id(self, obj):
        order = getattr(obj, "order", None)
        return order.pk if order is not None else None


class NextInvoiceNumberSerializer(serializers.Serializer):
    next = serializers.CharField()
