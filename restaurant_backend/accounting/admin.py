# accounting/admin.py

from django.contrib import admin

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.models.period_close import PeriodClose

# ============================================================
# CHART OF ACCOUNTS
# ============================================================


@admin.register(ChartOfAccounts)
class ChartOfAccountsAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "business_type", "is_active", "updated_at")
    list_filter = ("business_type", "is_active")
    search_fields = ("name", "code")
    readonly_fields = ("created_at", "updated_at")
    ordering = ("name",)


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "account_type", "chart", "is_active")
    list_filter = ("account_type", "is_active", "chart")
    search_fields = ("code", "name")
    ordering = ("chart", "code")
    readonly_fields = ("created_at", "updated_at")


# ============================================================
# JOURNAL / LEDGER / PERIOD CLOSE (READ-ONLY)
# ============================================================


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class LedgerEntryInline(admin.TabularInline):
    model = LedgerEntry
    extra = 0
    can_delete = False
    fields = ("account", "entry_type", "amount", "created_at")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyAdmin):
    list_display = ("id", "description", "reference", "branch", "posted_at", "is_posted")
    list_filter = ("is_posted", "branch", "posted_at")
    search_fields = ("description", "reference")
    ordering = ("-posted_at",)
    inlines = [LedgerEntryInline]


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdmin):
    list_display = ("id", "journal_entry", "account", "entry_type", "amount", "created_at")
    list_filter = ("entry_type", "account")
    search_fields = ("journal_entry__reference", "account__code")
    ordering = ("created_at",)


@admin.register(PeriodClose)
class PeriodCloseAdmin(admin.ModelAdmin):
    list_display = ("chart", "start_date", "end_date", "closing_entry", "created_at")
    list_filter = ("chart",)
    readonly_fields = ("created_at",)

    def has_change_permission(self, request, obj=None):
        return obj is None

    def has_delete_permission(self, request, obj=None):
        return False
