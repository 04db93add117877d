"""Tests for the commission Celery tasks, run in-process."""
from decimal import Decimal

import pytest

import commissions.tasks as commission_tasks
from commissions.models import MonthlyActivity, MonthlyCommission
from commissions.tasks import (
    recompute_organization_month,
    recompute_user_commission,
    refresh_current_month_commissions,
)

MONTH = "2026-03"


def test_recompute_user_commission(sales_member, sales_rules, sales_user):
    MonthlyActivity.objects.create(user=sales_user, month=MONTH, active_leads=4)

    result = recompute_user_commission.apply(kwargs={"user_id": str(sales_user.id), "month": MONTH}).get()

    assert result == "15000.00"
    assert MonthlyCommission.objects.get(user=sales_user).last_trigger == "SCHEDULED"


def test_missing_rules_are_not_retried(sales_member, sales_user):
    result = recompute_user_commission.apply(kwargs={"user_id": str(sales_user.id), "month": MONTH}).get()

    assert result is None
    assert not MonthlyCommission.objects.exists()


def test_unexpected_errors_are_retried(monkeypatch, sales_member, sales_rules, sales_user):
    def broken(*args, **kwargs):
        raise RuntimeError("database went away")

    retries = []

    def fake_retry(exc=None, **kwargs):
        retries.append(exc)
        return exc

    monkeypatch.setattr("commissions.services.compute_monthly_commission", broken)
    monkeypatch.setattr(recompute_user_commission, "retry", fake_retry)

    with pytest.raises(RuntimeError):
        recompute_user_commission.run(user_id=str(sales_user.id), month=MONTH)

    assert len(retries) == 1


def test_recompute_organization_month(
    organization, sales_member, other_sales_member, dispatch_member, sales_rules, sales_user,
):
    MonthlyActivity.objects.create(user=sales_user, month=MONTH, active_leads=2)

    computed = recompute_organization_month(organization_id=str(organization.id), month=MONTH)

    # dispatch has no rule set yet and is skipped
    assert computed == 2
    assert MonthlyCommission.objects.filter(organization=organization, month=MONTH).count() == 2
    assert MonthlyCommission.objects.get(user=sales_user).total_commission == Decimal("5000.00")


def test_inactive_members_are_skipped(organization, sales_member, other_sales_member, sales_rules):
    other_sales_member.is_active = False
    other_sales_member.save()

    assert recompute_organization_month(organization_id=str(organization.id), month=MONTH) == 1


def test_refresh_current_month(monkeypatch, organization, sales_member, sales_rules, sales_user):
    monkeypatch.setattr("commissions.periods.current_month", lambda: MONTH)

    refresh_current_month_commissions()

    assert MonthlyCommission.objects.filter(user=sales_user, month=MONTH).exists()


def test_refresh_continues_after_failure(monkeypatch, organization, db):
    seen = []

    def failing(*, organization_id, month, trigger="SCHEDULED"):
        seen.append(organization_id)
        raise RuntimeError("boom")

    monkeypatch.setattr(commission_tasks, "recompute_organization_month", failing)

    refresh_current_month_commissions()

    assert seen == [str(organization.id)]
