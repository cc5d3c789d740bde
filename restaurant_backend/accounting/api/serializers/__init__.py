# accounting/api/serializers/__init__.py

from accounting.api.serializers.journal_entries import JournalEntrySerializer
from accounting.api.serializers.ledger_entries import LedgerEntrySerializer

__all__ = [
    "JournalEntrySerializer",
    "LedgerEntrySerializer",
]
