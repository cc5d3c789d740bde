# accounting/tests/test_seed_chart.py

from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from accounting.management.commands.seed_restaurant_chart import ACCOUNTS
from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.account_resolver import DEFAULT_CHART_CODE, clear_active_chart_cache, get_active_chart


class SeedRestaurantChartTests(TestCase):
    def setUp(self):
        clear_active_chart_cache()

    def _seed(self):
        call_command("seed_restaurant_chart", stdout=StringIO())

    def test_seed_creates_active_chart_with_accounts(self):
        self._seed()

        chart = get_active_chart()
        self.assertEqual(chart.code, DEFAULT_CHART_CODE)
        self.assertEqual(
            set(chart.accounts.values_list("code", flat=True)),
            {code for code, _, _ in ACCOUNTS},
        )

    def test_seed_is_idempotent_and_repairs_accounts(self):
        self._seed()
        Account.objects.filter(code="2141").update(is_active=False, name="Renamed")

        self._seed()

        self.assertEqual(ChartOfAccounts.objects.count(), 1)
        self.assertEqual(Account.objects.count(), len(ACCOUNTS))
        vat = Account.objects.get(code="2141")
        self.assertTrue(vat.is_active)
        self.assertEqual(vat.name, "Output VAT Payable")

    def test_seed_takes_over_from_another_active_chart(self):
        other = ChartOfAccounts.objects.create(name="Legacy", code="legacy", is_active=True)

        self._seed()

        other.refresh_from_db()
        self.assertFalse(other.is_active)
        self.assertEqual(get_active_chart().code, DEFAULT_CHART_CODE)

    def test_active_chart_is_bootstrapped_when_missing(self):
        chart = get_active_chart()

        self.assertEqual(chart.code, DEFAULT_CHART_CODE)
        self.assertTrue(chart.is_active)
