# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Raised by the journal engine, the account resolver and the posting adapter.
Callers outside accounting (e.g. invoice issuance) treat any of these as a
failed ledger posting.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class PostingRuleError(AccountingServiceError):
    """Raised when a business document cannot be mapped to postings."""


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal entry cannot be created."""


class IdempotencyError(AccountingServiceError):
    """Raised when a journal entry already exists for a reference."""
