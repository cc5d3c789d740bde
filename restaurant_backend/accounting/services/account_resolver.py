# accounting/services/account_resolver.py

"""
ACCOUNT RESOLVER (AUTHORITATIVE)

Answers ONE question: "Which account should be used for this purpose?"

- Semantic keys (CASH, BANK, AR, VAT_PAYABLE, SALES_REVENUE, SALES_REVENUE_CREDIT)
  map to account codes per chart.
- Revenue codes may be overridden per branch through
  settings.POS_BRANCH_REVENUE_CODES, e.g.
      {"place_india": {"SALES_REVENUE": "4121", "SALES_REVENUE_CREDIT": "4122"}}
- Missing setup hard-fails with AccountResolutionError; we never post to a
  guessed account.

Bootstrap:
- No active chart: activate the oldest chart, or create the default one.
- More than one active chart: hard-fail.
"""

from __future__ import annotations

import logging
from functools import lru_cache

from django.conf import settings
from django.core.exceptions import MultipleObjectsReturned, ObjectDoesNotExist
from django.db import transaction

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.exceptions import AccountResolutionError

logger = logging.getLogger(__name__)

DEFAULT_CHART_CODE = "restaurant_standard"
DEFAULT_CHART_NAME = "Restaurant Standard Chart"

DEFAULT_CODES = {
    "CASH": "1111",
    "BANK": "1121",
    "AR": "1141",
    "VAT_PAYABLE": "2141",
    "SALES_REVENUE": "4111",
    "SALES_REVENUE_CREDIT": "4112",
}

# Charts whose numbering differs from DEFAULT_CODES, keyed by chart.code.
CHART_CODE_MAP: dict[str, dict[str, str]] = {
    DEFAULT_CHART_CODE: DEFAULT_CODES,
}


def _norm_branch(branch: str | None) -> str:
    return "_".join(str(branch or "").strip().lower().split())


def _codes_for_chart(chart: ChartOfAccounts) -> dict:
    return CHART_CODE_MAP.get((chart.code or "").strip(), DEFAULT_CODES)


def _ensure_single_active_chart() -> ChartOfAccounts:
    with transaction.atomic():
        active = list(ChartOfAccounts.objects.select_for_update().filter(is_active=True)[:2])

        if len(active) == 1:
            return active[0]
        if len(active) > 1:
            raise AccountResolutionError(
                "Multiple active Charts of Accounts found. Only one active chart is allowed."
            )

        existing = ChartOfAccounts.objects.select_for_update().order_by("id").first()
        if existing:
            existing.is_active = True
            existing.save(update_fields=["is_active"])
            logger.warning("Activated existing chart of accounts", extra={"chart_id": existing.id})
            return existing

        chart = ChartOfAccounts.objects.create(
            name=DEFAULT_CHART_NAME,
            code=DEFAULT_CHART_CODE,
            business_type=ChartOfAccounts.BUSINESS_RESTAURANT,
            is_active=True,
        )
        logger.warning("Created default chart of accounts", extra={"chart_id": chart.id})
        return chart


@lru_cache(maxsize=1)
def _cached_active_chart() -> ChartOfAccounts:
    return ChartOfAccounts.objects.get(is_active=True)


def get_active_chart() -> ChartOfAccounts:
    """
    Cached resolver for the single active chart.
    Call clear_active_chart_cache() after switching charts (ChartOfAccounts.save does).

    A chart created or activated by the bootstrap path is not cached: it may
    still be rolled back with the caller's transaction.
    """
    try:
        return _cached_active_chart()
    except ObjectDoesNotExist:
        return _ensure_single_active_chart()
    except MultipleObjectsReturned as exc:
        raise AccountResolutionError(
            "Multiple active Charts of Accounts found. Only one active chart is allowed."
        ) from exc


def clear_active_chart_cache() -> None:
    _cached_active_chart.cache_clear()


def _resolve_code(*, semantic_key: str, chart: ChartOfAccounts, branch: str | None = None) -> str:
    semantic_key = (semantic_key or "").strip().upper()
    if not semantic_key:
        raise AccountResolutionError("semantic_key is required")

    overrides = getattr(settings, "POS_BRANCH_REVENUE_CODES", {}) or {}
    branch_codes = overrides.get(_norm_branch(branch), {}) if branch else {}

    code = (branch_codes.get(semantic_key) or _codes_for_chart(chart).get(semantic_key) or "").strip()
    if not code:
        raise AccountResolutionError(
            f"Missing mapping for semantic key '{semantic_key}' in chart '{chart.name}'."
        )
    return code


def _get_account_by_code(*, chart: ChartOfAccounts, code: str) -> Account:
    try:
        return Account.objects.postable(chart).get(code=code)
    except ObjectDoesNotExist as exc:
        raise AccountResolutionError(
            f"Account with code={code} not found (or inactive) in active chart '{chart.name}'. "
            "Run `manage.py seed_restaurant_chart`."
        ) from exc


def resolve_account(semantic_key: str, *, branch: str | None = None) -> Account:
    chart = get_active_chart()
    return _get_account_by_code(
        chart=chart,
        code=_resolve_code(semantic_key=semantic_key, chart=chart, branch=branch),
    )


def get_cash_account() -> Account:
    return resolve_account("CASH")


def get_bank_account() -> Account:
    return resolve_account("BANK")


def get_accounts_receivable_account() -> Account:
    return resolve_account("AR")


def get_vat_payable_account() -> Account:
    return resolve_account("VAT_PAYABLE")


def get_sales_revenue_account(*, branch: str | None = None, on_credit: bool = False) -> Account:
    key = "SALES_REVENUE_CREDIT" if on_credit else "SALES_REVENUE"
    return resolve_account(key, branch=branch)
