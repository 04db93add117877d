"""Month-over-month comparison of commission snapshots."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings

from commissions.periods import previous_month

HUNDRED = Decimal("100")


def growth_percent(previous, current) -> int:
    """
    Percentage change from ``previous`` to ``current`` total commission.

    A missing or zero previous month counts as +100 when the current month
    earned anything and 0 otherwise. Rounds half away from zero; never capped.
    """
    current = Decimal(current or 0)
    previous = Decimal(previous or 0)
    if previous == 0:
        return 100 if current > 0 else 0
    change = (current - previous) / previous * HUNDRED
    return int(change.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class HistoricalComparator:
    """Growth and consecutive-growth streak for one user."""

    def __init__(self, repository, max_months: int = None) -> None:
        self.repository = repository
        if max_months is None:
            max_months = getattr(settings, "COMMISSION_STREAK_MAX_MONTHS", 24)
        self.max_months = max_months

    def growth_for(self, record) -> int:
        previous = self.repository.get_snapshot(record.user_id, previous_month(record.month))
        return growth_percent(
            previous.total_commission if previous else None,
            record.total_commission,
        )

    def streak(self, user_id, month: str) -> int:
        """Number of consecutive months, ending at ``month``, that improved on the one before."""
        current = self.repository.get_snapshot(str(user_id), month)
        if current is None:
            return 0

        streak = 0
        cursor = month
        for _ in range(self.max_months):
            cursor = previous_month(cursor)
            prior = self.repository.get_snapshot(str(user_id), cursor)
            if prior is None or prior.total_commission >= current.total_commission:
                break
            streak += 1
            if prior.total_commission == 0:
                break
            current = prior
        return streak
