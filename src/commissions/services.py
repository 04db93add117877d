"""Entry points of the commission engine used by views, tasks and signals."""
from __future__ import annotations

import logging

from commissions.engine import CommissionAggregator
from commissions.ranking import RankingEngine
from commissions.repository import DjangoCommissionRepository

logger = logging.getLogger(__name__)


def compute_monthly_commission(user_id, month: str, *, trigger: str = None, repository=None):
    """Compute, persist and return the MonthlyCommissionRecord of ``user_id`` for ``month``."""
    repository = repository or DjangoCommissionRepository()
    return CommissionAggregator(repository).compute(user_id, month, trigger=trigger)


def rank_cohort(organization_id, month: str, commission_type=None, limit=None, *, repository=None):
    repository = repository or DjangoCommissionRepository()
    return RankingEngine(repository).rank(
        organization_id,
        month,
        commission_type=commission_type,
        limit=limit,
    )


def get_user_metrics(user_id, month: str, *, repository=None) -> dict:
    """
    Snapshot, growth, rank, target share and badges of one user for ``month``.

    The snapshot is computed on the fly when none is stored yet.
    """
    repository = repository or DjangoCommissionRepository()
    user_id = str(user_id)

    record = repository.get_snapshot(user_id, month)
    if record is None:
        logger.info("No snapshot for user=%s month=%s, computing on demand", user_id, month)
        record = compute_monthly_commission(
            user_id, month, trigger="ON_DEMAND", repository=repository,
        )

    entry = RankingEngine(repository).entry_for(record)

    return {
        "record": record,
        "growth_percent": entry.growth_percent,
        "rank": entry.rank,
        "target_percent": entry.target_percent,
        "badges": list(entry.badges),
        "streak": entry.streak,
    }


def create_rule_set(organization, commission_type, tiers, *, name="", updated_by=None):
    """
    Install ``tiers`` as the new active rule set of ``organization``/``commission_type``.

    Any previously active version is deactivated and the version number is
    bumped. Raises ``InvalidRuleSetError`` when the tiers are not a valid
    ordered rule set.
    """
    from django.db import transaction

    from commissions.models import CommissionRuleSet, CommissionTier
    from commissions.tiers import Tier, validate_tiers

    validate_tiers(commission_type, [Tier(**tier) for tier in tiers])

    with transaction.atomic():
        existing = list(
            CommissionRuleSet.objects.select_for_update().filter(
                organization=organization,
                type=commission_type,
            )
        )
        latest_version = max((rule_set.version for rule_set in existing), default=0)
        CommissionRuleSet.objects.filter(
            pk__in=[rule_set.pk for rule_set in existing if rule_set.is_active],
        ).update(is_active=False)

        rule_set = CommissionRuleSet.objects.create(
            organization=organization,
            type=commission_type,
            name=name,
            version=latest_version + 1,
            is_active=True,
            updated_by=updated_by,
        )
        for position, tier in enumerate(tiers, start=1):
            CommissionTier.objects.create(rule_set=rule_set, position=position, **tier)

    logger.info(
        "Installed %s commission rules v%d for organization=%s (%d tiers)",
        commission_type,
        rule_set.version,
        organization.pk,
        len(tiers),
    )
    return rule_set
