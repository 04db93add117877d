"""Data access for the commission engine.

Engine components receive a repository instead of touching the ORM, so the
algorithms can run against any storage. ``DjangoCommissionRepository`` is the
implementation used by the application.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from django.conf import settings
from django.db import IntegrityError, transaction

from commissions.exceptions import CommissionConfigurationError, UnknownMemberError
from commissions.records import BONUS_TYPES, Membership, MonthlyCommissionRecord
from commissions.tiers import DISPATCH, SALES, ZERO, RuleSet

logger = logging.getLogger(__name__)


class CommissionRepository:
    """Storage contract consumed by the engine components."""

    def get_activity_metric(self, user_id, month, commission_type):
        """Active lead count (sales) or gross revenue (dispatch); 0 when unknown."""
        raise NotImplementedError

    def get_rule_set(self, organization_id, commission_type) -> RuleSet:
        """Active rule set, or raise ``CommissionConfigurationError``."""
        raise NotImplementedError

    def get_snapshot(self, user_id, month):
        raise NotImplementedError

    def put_snapshot(self, record, trigger=None):
        raise NotImplementedError

    def get_department_target(self, organization_id, commission_type, month) -> Decimal:
        raise NotImplementedError

    def get_cohort_users(self, organization_id, commission_type) -> list:
        raise NotImplementedError

    def get_member(self, user_id) -> Membership:
        raise NotImplementedError

    def get_bonuses(self, user_id, month) -> dict:
        raise NotImplementedError

    def list_snapshots(self, organization_id, month, commission_type=None) -> list:
        raise NotImplementedError


def _record_from_model(obj) -> MonthlyCommissionRecord:
    return MonthlyCommissionRecord(
        user_id=str(obj.user_id),
        organization_id=str(obj.organization_id),
        month=obj.month,
        department=obj.department,
        active_leads=obj.active_leads,
        invoice_total=obj.invoice_total,
        tier_label=obj.tier_label,
        tier_fixed=obj.tier_fixed,
        tier_pct=obj.tier_pct,
        penalty_pct=obj.penalty_pct,
        base_commission=obj.base_commission,
        bonuses={name: Decimal(str(obj.bonuses.get(name, "0"))) for name in BONUS_TYPES},
        total_commission=obj.total_commission,
    )


class DjangoCommissionRepository(CommissionRepository):
    """ORM-backed repository."""

    def get_activity_metric(self, user_id, month, commission_type):
        from commissions.models import MonthlyActivity

        activity = MonthlyActivity.objects.filter(user_id=user_id, month=month).first()
        if commission_type == SALES:
            return activity.active_leads if activity else 0
        return activity.gross_revenue if activity else ZERO

    def get_rule_set(self, organization_id, commission_type) -> RuleSet:
        from commissions.models import CommissionRuleSet

        rule_set = (
            CommissionRuleSet.objects.filter(
                organization_id=organization_id,
                type=commission_type,
                is_active=True,
            )
            .order_by("-version")
            .first()
        )
        if rule_set is None:
            logger.warning(
                "No active %s commission rule set for organization=%s",
                commission_type,
                organization_id,
            )
            raise CommissionConfigurationError(organization_id, commission_type)
        return RuleSet(
            organization_id=str(organization_id),
            commission_type=commission_type,
            tiers=tuple(rule_set.as_tiers()),
            version=rule_set.version,
            floor_penalty_pct=self._floor_penalty(commission_type),
        )

    @staticmethod
    def _floor_penalty(commission_type) -> Decimal:
        if commission_type != DISPATCH:
            return ZERO
        return Decimal(str(getattr(settings, "COMMISSION_DISPATCH_FLOOR_PENALTY_PCT", -25)))

    def get_snapshot(self, user_id, month):
        from commissions.models import MonthlyCommission

        obj = MonthlyCommission.objects.filter(user_id=user_id, month=month).first()
        return _record_from_model(obj) if obj else None

    def put_snapshot(self, record, trigger=None):
        """Upsert on (user, month). A racing insert is retried once as an update."""
        from commissions.models import MonthlyCommission

        defaults = {
            "organization_id": record.organization_id,
            "department": record.department,
            "active_leads": record.active_leads,
            "invoice_total": record.invoice_total,
            "tier_label": record.tier_label,
            "tier_fixed": record.tier_fixed,
            "tier_pct": record.tier_pct,
            "penalty_pct": record.penalty_pct,
            "base_commission": record.base_commission,
            "bonuses": {name: str(amount) for name, amount in record.bonuses.items()},
            "total_commission": record.total_commission,
            "last_trigger": trigger or MonthlyCommission.TriggerSource.MANUAL,
        }
        try:
            with transaction.atomic():
                obj, created = MonthlyCommission.objects.update_or_create(
                    user_id=record.user_id,
                    month=record.month,
                    defaults=defaults,
                )
        except IntegrityError:
            logger.info(
                "Concurrent insert for user=%s month=%s, retrying as update",
                record.user_id,
                record.month,
            )
            with transaction.atomic():
                obj, created = MonthlyCommission.objects.update_or_create(
                    user_id=record.user_id,
                    month=record.month,
                    defaults=defaults,
                )

        logger.info(
            "%s commission snapshot user=%s month=%s total=%s",
            "Created" if created else "Updated",
            record.user_id,
            record.month,
            record.total_commission,
        )
        return obj

    def get_department_target(self, organization_id, commission_type, month) -> Decimal:
        from commissions.models import DepartmentTarget

        target = DepartmentTarget.objects.filter(
            organization_id=organization_id,
            department=commission_type,
            month=month,
        ).first()
        return target.amount if target else ZERO

    def get_cohort_users(self, organization_id, commission_type) -> list:
        from organizations.models import OrganizationMember

        user_ids = OrganizationMember.objects.filter(
            organization_id=organization_id,
            department=commission_type,
            is_active=True,
            user__is_active=True,
        ).values_list("user_id", flat=True)
        return [str(user_id) for user_id in user_ids]

    def get_member(self, user_id) -> Membership:
        from organizations.models import OrganizationMember

        member = OrganizationMember.objects.filter(
            user_id=user_id,
            is_active=True,
        ).first()
        if member is None:
            raise UnknownMemberError(user_id)
        return Membership(
            organization_id=str(member.organization_id),
            department=member.department,
            is_team_lead=member.is_team_lead,
        )

    def get_bonuses(self, user_id, month) -> dict:
        from commissions.models import CommissionBonus

        rows = CommissionBonus.objects.filter(user_id=user_id, month=month)
        return {row.bonus_type: row.amount for row in rows}

    def list_snapshots(self, organization_id, month, commission_type=None) -> list:
        from commissions.models import MonthlyCommission

        qs = MonthlyCommission.objects.filter(organization_id=organization_id, month=month)
        if commission_type:
            qs = qs.filter(department=commission_type)
        return [_record_from_model(obj) for obj in qs]
