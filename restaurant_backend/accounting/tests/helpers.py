# accounting/tests/helpers.py

from __future__ import annotations

from io import StringIO

from django.core.management import call_command

from accounting.models.account import Account
from accounting.services.account_resolver import clear_active_chart_cache, get_active_chart


def seed_restaurant_chart():
    """Seed the restaurant chart and return it (fresh, not from a stale cache)."""
    clear_active_chart_cache()
    call_command("seed_restaurant_chart", stdout=StringIO())
    clear_active_chart_cache()
    return get_active_chart()


def account(chart, code: str) -> Account:
    return Account.objects.get(chart=chart, code=code)
