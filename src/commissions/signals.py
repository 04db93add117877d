"""Signals: trigger commission recomputation when upstream data changes."""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from commissions.periods import current_month

logger = logging.getLogger(__name__)


def _recompute_now(*, user_id, month: str) -> None:
    """Best-effort local recompute for immediate dashboard consistency."""
    from commissions.services import compute_monthly_commission

    compute_monthly_commission(str(user_id), month, trigger="SIGNAL")


def _queue_recompute(*, user_id, month: str, sync_recompute: bool = True) -> None:
    def _dispatch() -> None:
        queued = False
        try:
            from commissions.tasks import recompute_user_commission

            recompute_user_commission.delay(user_id=str(user_id), month=month, trigger="SIGNAL")
            queued = True
        except Exception as exc:
            logger.warning("commission async dispatch failed: %s", exc, exc_info=True)

        if sync_recompute:
            try:
                _recompute_now(user_id=user_id, month=month)
            except Exception as exc:
                # A recompute failure must not break the business transaction.
                level = logger.warning if queued else logger.error
                level("commission sync recompute failed: %s", exc, exc_info=True)

    transaction.on_commit(_dispatch)


def _queue_organization_recompute(*, organization_id, month: str) -> None:
    def _dispatch() -> None:
        try:
            from commissions.tasks import recompute_organization_month

            recompute_organization_month.delay(organization_id=str(organization_id), month=month)
        except Exception as exc:
            logger.warning("commission organization dispatch failed: %s", exc, exc_info=True)

    transaction.on_commit(_dispatch)


@receiver(post_save, sender="commissions.MonthlyActivity")
def on_activity_saved(sender, instance, **kwargs):
    _queue_recompute(user_id=instance.user_id, month=instance.month)


@receiver(post_delete, sender="commissions.MonthlyActivity")
def on_activity_deleted(sender, instance, **kwargs):
    _queue_recompute(user_id=instance.user_id, month=instance.month)


@receiver(post_save, sender="commissions.CommissionBonus")
def on_bonus_saved(sender, instance, **kwargs):
    _queue_recompute(user_id=instance.user_id, month=instance.month)


@receiver(post_delete, sender="commissions.CommissionBonus")
def on_bonus_deleted(sender, instance, **kwargs):
    _queue_recompute(user_id=instance.user_id, month=instance.month)


@receiver(post_save, sender="commissions.CommissionRuleSet")
def on_rule_set_saved(sender, instance, created, **kwargs):
    """A new active version changes every current-month snapshot of the department."""
    if not created or not instance.is_active:
        return
    _queue_organization_recompute(organization_id=instance.organization_id, month=current_month())
