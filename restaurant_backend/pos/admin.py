from django.contrib import admin

from .models import Order

# =====================================================
# TABLE ORDER ADMIN
# =====================================================


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "branch",
        "table_code",
        "status",
        "total_amount",
        "invoice",
        "updated_at",
    )
    list_filter = ("status", "branch")
    search_fields = ("table_code", "customer_name", "customer_phone")
    ordering = ("-updated_at",)
    readonly_fields = (
        "status",
        "invoice",
        "subtotal",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "created_at",
        "updated_at",
    )

    def has_delete_permission(self, request, obj=None):
        return False
