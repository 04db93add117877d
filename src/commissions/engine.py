"""Monthly commission aggregation.

Combines the tier reward for the user's activity metric with the named
bonuses of the month and persists the result as one snapshot per
(user, month). Recomputing with unchanged inputs yields an identical record.
"""
from __future__ import annotations

import logging

from commissions.periods import validate_month
from commissions.records import BONUS_TYPES, TEAM_LEAD_BONUS, MonthlyCommissionRecord
from commissions.tiers import SALES, ZERO, compute_reward, quantize_money

logger = logging.getLogger(__name__)


class CommissionAggregator:
    """Compute and persist MonthlyCommissionRecord snapshots."""

    def __init__(self, repository) -> None:
        self.repository = repository

    def compute(self, user_id, month: str, trigger: str = None) -> MonthlyCommissionRecord:
        """
        Compute the snapshot for ``user_id``/``month`` and upsert it.

        The team lead bonus only counts for team leads.

        Raises ``CommissionConfigurationError`` when the user's organization
        has no active rule set for their department, and ``ValueError`` for a
        malformed month key.
        """
        validate_month(month)
        user_id = str(user_id)
        member = self.repository.get_member(user_id)

        rule_set = self.repository.get_rule_set(member.organization_id, member.department)
        metric = self.repository.get_activity_metric(user_id, month, member.department)
        reward = compute_reward(rule_set, metric)

        bonuses = self.repository.get_bonuses(user_id, month)
        if not member.is_team_lead and bonuses.get(TEAM_LEAD_BONUS):
            logger.warning(
                "Ignoring team lead bonus of %s for user=%s month=%s: not a team lead",
                bonuses[TEAM_LEAD_BONUS],
                user_id,
                month,
            )
            bonuses = {name: amount for name, amount in bonuses.items() if name != TEAM_LEAD_BONUS}

        record = self.build_record(
            user_id=user_id,
            organization_id=member.organization_id,
            month=month,
            department=member.department,
            metric=metric,
            reward=reward,
            bonuses=bonuses,
        )
        self.repository.put_snapshot(record, trigger=trigger)
        return record

    @staticmethod
    def build_record(*, user_id, organization_id, month, department, metric, reward, bonuses):
        named_bonuses = {
            name: quantize_money(bonuses.get(name) or ZERO)
            for name in BONUS_TYPES
        }
        total = reward.base_commission + sum(named_bonuses.values(), ZERO)
        is_sales = department == SALES
        return MonthlyCommissionRecord(
            user_id=user_id,
            organization_id=organization_id,
            month=month,
            department=department,
            active_leads=int(metric) if is_sales else 0,
            invoice_total=ZERO if is_sales else quantize_money(metric),
            tier_label=reward.label,
            tier_fixed=reward.fixed_amount,
            tier_pct=reward.percentage,
            penalty_pct=reward.penalty_pct,
            base_commission=reward.base_commission,
            bonuses=named_bonuses,
            total_commission=quantize_money(total),
        )
