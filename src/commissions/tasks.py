"""Celery tasks for the commission engine."""
from __future__ import annotations

import logging

from celery import shared_task

from commissions.exceptions import CommissionConfigurationError, UnknownMemberError

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def recompute_user_commission(self, *, user_id: str, month: str, trigger: str = "SCHEDULED"):
    """Recompute the MonthlyCommission snapshot of a single user/month."""
    from commissions.services import compute_monthly_commission

    try:
        record = compute_monthly_commission(user_id, month, trigger=trigger)
    except (CommissionConfigurationError, UnknownMemberError, ValueError) as exc:
        # Retrying cannot fix missing rules or bad input.
        logger.warning("recompute_user_commission skipped user=%s month=%s: %s", user_id, month, exc)
        return None
    except Exception as exc:
        logger.exception("recompute_user_commission failed: %s", exc)
        raise self.retry(exc=exc)

    logger.info("Recomputed commission for user=%s month=%s", user_id, month)
    return str(record.total_commission)


@shared_task
def recompute_organization_month(*, organization_id: str, month: str, trigger: str = "SCHEDULED"):
    """Recompute snapshots for ALL active members of an organization for a month."""
    from commissions.services import compute_monthly_commission
    from organizations.models import OrganizationMember

    user_ids = list(
        OrganizationMember.objects.filter(
            organization_id=organization_id,
            is_active=True,
            user__is_active=True,
        ).values_list("user_id", flat=True)
    )

    computed = 0
    for user_id in user_ids:
        try:
            compute_monthly_commission(str(user_id), month, trigger=trigger)
            computed += 1
        except CommissionConfigurationError as exc:
            logger.warning("Skipping user=%s: %s", user_id, exc)

    logger.info(
        "Recomputed organization month org=%s month=%s (%d/%d members)",
        organization_id,
        month,
        computed,
        len(user_ids),
    )
    return computed


@shared_task
def refresh_current_month_commissions():
    """
    Run every hour (Celery Beat).
    Recompute the current month for every active organization.
    """
    from commissions.periods import current_month
    from organizations.models import Organization

    month = current_month()
    organization_ids = list(Organization.objects.filter(is_active=True).values_list("id", flat=True))
    for organization_id in organization_ids:
        try:
            recompute_organization_month(organization_id=str(organization_id), month=month)
        except Exception as exc:
            logger.warning("Commission refresh failed org=%s: %s", organization_id, exc)

    logger.info("Refreshed commissions for %d organizations (month=%s)", len(organization_ids), month)
