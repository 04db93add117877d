"""Regression tests for commission signal dispatching."""
from decimal import Decimal
from types import SimpleNamespace

import commissions.signals as commission_signals
import commissions.tasks as commission_tasks
from commissions.models import CommissionBonus, MonthlyActivity, MonthlyCommission
from commissions.signals import (
    on_activity_deleted,
    on_activity_saved,
    on_bonus_saved,
    on_rule_set_saved,
)


def _capture_delay(monkeypatch, task=None):
    calls = []

    def fake_delay(**kwargs):
        calls.append(kwargs)

    monkeypatch.setattr(task or commission_tasks.recompute_user_commission, "delay", fake_delay)
    return calls


def _capture_sync(monkeypatch):
    calls = []

    def fake_recompute(*, user_id, month):
        calls.append((user_id, month))

    monkeypatch.setattr(commission_signals, "_recompute_now", fake_recompute)
    return calls


def test_activity_signal_queues_recompute(monkeypatch, db, django_capture_on_commit_callbacks):
    calls = _capture_delay(monkeypatch)
    sync_calls = _capture_sync(monkeypatch)
    activity = SimpleNamespace(user_id="user-1", month="2026-02")

    with django_capture_on_commit_callbacks(execute=True):
        on_activity_saved(sender=None, instance=activity)

    assert calls == [{"user_id": "user-1", "month": "2026-02", "trigger": "SIGNAL"}]
    assert sync_calls == [("user-1", "2026-02")]


def test_nothing_is_queued_before_commit(monkeypatch, db, django_capture_on_commit_callbacks):
    calls = _capture_delay(monkeypatch)
    _capture_sync(monkeypatch)

    with django_capture_on_commit_callbacks() as callbacks:
        on_activity_deleted(sender=None, instance=SimpleNamespace(user_id="user-2", month="2026-01"))

    assert len(callbacks) == 1
    assert calls == []


def test_bonus_signal_uses_bonus_month(monkeypatch, db, django_capture_on_commit_callbacks):
    calls = _capture_delay(monkeypatch)
    _capture_sync(monkeypatch)

    with django_capture_on_commit_callbacks(execute=True):
        on_bonus_saved(sender=None, instance=SimpleNamespace(user_id="user-3", month="2025-12"))

    assert calls[0]["month"] == "2025-12"
    assert calls[0]["user_id"] == "user-3"


def test_broken_broker_still_recomputes_locally(monkeypatch, db, django_capture_on_commit_callbacks):
    def failing_delay(**kwargs):
        raise ConnectionError("broker unreachable")

    monkeypatch.setattr(commission_tasks.recompute_user_commission, "delay", failing_delay)
    sync_calls = _capture_sync(monkeypatch)

    with django_capture_on_commit_callbacks(execute=True):
        on_activity_saved(sender=None, instance=SimpleNamespace(user_id="user-4", month="2026-03"))

    assert sync_calls == [("user-4", "2026-03")]


def test_sync_failure_does_not_propagate(monkeypatch, db, django_capture_on_commit_callbacks):
    _capture_delay(monkeypatch)

    def failing_recompute(*, user_id, month):
        raise RuntimeError("boom")

    monkeypatch.setattr(commission_signals, "_recompute_now", failing_recompute)

    with django_capture_on_commit_callbacks(execute=True):
        on_activity_saved(sender=None, instance=SimpleNamespace(user_id="user-5", month="2026-03"))


def test_saving_activity_refreshes_snapshot(
    monkeypatch, sales_member, sales_rules, sales_user, django_capture_on_commit_callbacks,
):
    _capture_delay(monkeypatch)

    with django_capture_on_commit_callbacks(execute=True):
        MonthlyActivity.objects.create(user=sales_user, month="2026-03", active_leads=3)

    stored = MonthlyCommission.objects.get(user=sales_user, month="2026-03")
    assert stored.total_commission == Decimal("10000.00")
    assert stored.last_trigger == "SIGNAL"

    with django_capture_on_commit_callbacks(execute=True):
        CommissionBonus.objects.create(
            user=sales_user, month="2026-03", bonus_type="own_lead", amount=Decimal("750"),
        )

    stored.refresh_from_db()
    assert stored.total_commission == Decimal("10750.00")


def test_new_active_rule_set_queues_organization_recompute(monkeypatch, db, django_capture_on_commit_callbacks):
    calls = _capture_delay(monkeypatch, commission_tasks.recompute_organization_month)
    monkeypatch.setattr(commission_signals, "current_month", lambda: "2026-04")
    rule_set = SimpleNamespace(organization_id="org-1", is_active=True)

    with django_capture_on_commit_callbacks(execute=True):
        on_rule_set_saved(sender=None, instance=rule_set, created=True)
        on_rule_set_saved(sender=None, instance=rule_set, created=False)
        on_rule_set_saved(
            sender=None, instance=SimpleNamespace(organization_id="org-1", is_active=False), created=True,
        )

    assert calls == [{"organization_id": "org-1", "month": "2026-04"}]
