# accounting/management/commands/seed_restaurant_chart.py

from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.account import Account
from accounting.models.chart import ChartOfAccounts
from accounting.services.account_resolver import DEFAULT_CHART_CODE, DEFAULT_CHART_NAME

ACCOUNTS = [
    # ASSETS
    ("1111", "Main Cash Box", Account.ASSET),
    ("1121", "Bank Account", Account.ASSET),
    ("1141", "Customers Receivable", Account.ASSET),
    # LIABILITIES
    ("2141", "Output VAT Payable", Account.LIABILITY),
    # REVENUE
    ("4111", "Cash Sales - China Town", Account.REVENUE),
    ("4112", "Credit Sales - China Town", Account.REVENUE),
    ("4121", "Cash Sales - Place India", Account.REVENUE),
    ("4122", "Credit Sales - Place India", Account.REVENUE),
]


def _activate_only_this_chart(chart: ChartOfAccounts) -> None:
    if not chart.is_active:
        chart.is_active = True
        chart.save(update_fields=["is_active"])


class Command(BaseCommand):
    help = "Seed the restaurant Chart of Accounts with the accounts invoice posting needs"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write("Seeding restaurant Chart of Accounts...")

        chart = ChartOfAccounts.objects.filter(code=DEFAULT_CHART_CODE).first()
        if chart is None:
            chart = ChartOfAccounts.objects.create(
                name=DEFAULT_CHART_NAME,
                code=DEFAULT_CHART_CODE,
                business_type=ChartOfAccounts.BUSINESS_RESTAURANT,
                is_active=True,
            )
            self.stdout.write("Created restaurant chart")
        else:
            self.stdout.write("Restaurant chart already exists")

        _activate_only_this_chart(chart)

        created_count = 0
        updated_count = 0

        for code, name, account_type in ACCOUNTS:
            acc, acc_created = Account.objects.get_or_create(
                chart=chart,
                code=code,
                defaults={"name": name, "account_type": account_type, "is_active": True},
            )
            if acc_created:
                created_count += 1
                continue

            if acc.name != name or acc.account_type != account_type or not acc.is_active:
                acc.name = name
                acc.account_type = account_type
                acc.is_active = True
                acc.save(update_fields=["name", "account_type", "is_active", "updated_at"])
                updated_count += 1

        self.stdout.write(
            self.style.SUCCESS(
                f"Restaurant chart seeded ({created_count} new accounts, {updated_count} updated)."
            )
        )
