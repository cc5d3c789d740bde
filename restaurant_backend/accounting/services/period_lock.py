# accounting/services/period_lock.py

"""
PERIOD LOCK GUARD

Blocks any journal entry whose posted_at date falls inside a closed
period of the chart being posted to. Called by the journal engine only.
"""

from __future__ import annotations

from datetime import date, datetime

from django.utils import timezone

from accounting.models.period_close import PeriodClose


class PeriodLockedError(ValueError):
    """Raised when attempting to post into a closed accounting period."""


def _to_date(value: datetime | date | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value, timezone.get_current_timezone())
        return timezone.localtime(value).date()
    if isinstance(value, date):
        return value
    return None


def is_period_closed(*, chart, on: datetime | date | None) -> bool:
    post_date = _to_date(on)
    if post_date is None:
        return False

    return PeriodClose.objects.filter(
        chart=chart,
        start_date__lte=post_date,
        end_date__gte=post_date,
    ).exists()


def assert_period_open(*, chart, posted_at: datetime | date | None) -> None:
    """
    Raises PeriodLockedError if posted_at falls inside a closed period.
    A missing posted_at is never locked.
    """
    if is_period_closed(chart=chart, on=posted_at):
        raise PeriodLockedError(
            f"Posting blocked: {_to_date(posted_at)} falls inside a closed period for this chart."
        )
