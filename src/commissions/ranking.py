"""Cohort ranking for one organization and month."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal

from commissions.badges import classify
from commissions.history import HistoricalComparator
from commissions.periods import validate_month
from commissions.records import RankedEntry
from commissions.tiers import ZERO

logger = logging.getLogger(__name__)


def target_percent(total, individual_target):
    """Share of the individual target reached, capped at 100; ``None`` without a target."""
    if not individual_target:
        return None
    pct = Decimal(total) / Decimal(individual_target) * Decimal("100")
    return min(int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP)), 100)


def _ranking_key(record):
    return (-record.total_commission, str(record.user_id))


class RankingEngine:
    """Order a cohort's snapshots by total commission and decorate each entry."""

    def __init__(self, repository, comparator: HistoricalComparator = None) -> None:
        self.repository = repository
        self.comparator = comparator or HistoricalComparator(repository)

    def rank(self, organization_id, month: str, commission_type=None, limit=None) -> list:
        """
        Ranked entries, best first. Ties on total go to the lower user id.

        ``rank`` is the 1-based position in the full cohort; ``limit`` only
        truncates the returned list.
        """
        validate_month(month)
        if limit is not None and limit < 0:
            raise ValueError("limit must not be negative.")

        records = self.repository.list_snapshots(organization_id, month, commission_type)
        ranked = list(enumerate(sorted(records, key=_ranking_key), start=1))
        if limit is not None:
            ranked = ranked[:limit]

        targets = {}
        entries = []
        for rank, record in ranked:
            if record.department not in targets:
                targets[record.department] = self._individual_target(
                    organization_id, record.department, month, records,
                )
            entries.append(self._entry(record, rank, targets[record.department]))

        logger.debug(
            "Ranked %d of %d snapshots org=%s month=%s type=%s",
            len(entries),
            len(records),
            organization_id,
            month,
            commission_type or "all",
        )
        return entries

    def entry_for(self, record) -> RankedEntry:
        """
        The ranked entry of one snapshot within its department cohort.

        Only this user's history is read; the rest of the cohort is used for
        its totals alone.
        """
        records = self.repository.list_snapshots(record.organization_id, record.month, record.department)
        key = _ranking_key(record)
        rank = 1 + sum(
            1 for other in records
            if str(other.user_id) != str(record.user_id) and _ranking_key(other) < key
        )
        if not any(str(other.user_id) == str(record.user_id) for other in records):
            records = records + [record]
        target = self._individual_target(
            record.organization_id, record.department, record.month, records,
        )
        return self._entry(record, rank, target)

    def _entry(self, record, rank, individual_target) -> RankedEntry:
        pct = target_percent(record.total_commission, individual_target)
        streak = self.comparator.streak(record.user_id, record.month)
        return RankedEntry(
            user_id=str(record.user_id),
            department=record.department,
            total_commission=record.total_commission,
            rank=rank,
            growth_percent=self.comparator.growth_for(record),
            target_percent=pct,
            badges=tuple(classify(rank, pct, streak)),
            streak=streak,
        )

    def _individual_target(self, organization_id, department, month, records) -> Decimal:
        """Department target split evenly across its active members."""
        target = self.repository.get_department_target(organization_id, department, month)
        if not target:
            return ZERO
        cohort_size = len(self.repository.get_cohort_users(organization_id, department))
        if not cohort_size:
            cohort_size = sum(1 for r in records if r.department == department)
        return Decimal(target) / cohort_size
