# PATH: accounting/api/view.py

"""
ACCOUNTING API VIEWSETS (READ-ONLY / AUDIT SAFE)

- Journal and ledger entries are append-only; the API never writes.
- Access is gated by Django model permissions (view_journalentry / view_ledgerentry).
- Filtering through django-filter:
    /api/accounting/journal-entries/?reference=INVOICE:42
    /api/accounting/ledger-entries/?journal_entry=30&account=28
"""

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter
from rest_framework.permissions import IsAuthenticated
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.serializers import JournalEntrySerializer, LedgerEntrySerializer
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(ReadOnlyModelViewSet):
    """
    Read-only access to journal entries with their ledger lines.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ["reference", "branch"]
    ordering_fields = ["posted_at", "created_at"]
    ordering = ["-posted_at"]

    queryset = JournalEntry.objects.filter(is_posted=True).prefetch_related("ledger_entries__account")

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_journalentry"):
            raise PermissionDenied("You do not have permission to view journal entries.")
        return super().get_queryset()


@extend_schema(tags=["accounting"])
class LedgerEntryViewSet(ReadOnlyModelViewSet):
    """
    Read-only access to ledger entries.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = LedgerEntrySerializer
    filter_backends = [DjangoFilterBackend, OrderingFilter]
    filterset_fields = ["journal_entry", "account", "entry_type"]
    ordering_fields = ["created_at"]
    ordering = ["-created_at"]

    queryset = LedgerEntry.objects.select_related("journal_entry", "account")

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_ledgerentry"):
            raise PermissionDenied("You do not have permission to view ledger entries.")
        return super().get_queryset()
