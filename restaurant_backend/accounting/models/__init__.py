# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

"""

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.models.journal import JournalEntry
from accounting.models.ledger import LedgerEntry
from accounting.models.period_close import PeriodClose

__all__ = [
    "ChartOfAccounts",
    "Account",
    "JournalEntry",
    "LedgerEntry",
    "PeriodClose",
]
