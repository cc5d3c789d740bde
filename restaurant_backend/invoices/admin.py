# invoices/admin.py

from django.contrib import admin

from invoices.models import Invoice, InvoiceSequence


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("number", "date", "type", "status", "branch", "total", "payment_method", "journal_entry")
    list_filter = ("type", "status", "branch", "payment_method")
    search_fields = ("number",)
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(InvoiceSequence)
class InvoiceSequenceAdmin(admin.ModelAdmin):
    list_display = ("year", "last_value", "updated_at")
    readonly_fields = ("year", "last_value", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
