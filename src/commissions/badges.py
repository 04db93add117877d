"""Qualitative achievement labels for a ranked entry."""
from __future__ import annotations

from django.conf import settings

TOP_PERFORMER = "top-performer"
TARGET_ACHIEVED = "target-achieved"
CONSISTENT_GROWTH = "consistent-growth"
AT_RISK = "at-risk"


def classify(rank: int, target_percent, streak: int, *, at_risk_percent=None, growth_streak=None) -> list:
    """
    Return the badges earned, always in the order top-performer,
    target-achieved, consistent-growth, at-risk.

    ``target_percent`` is ``None`` when no target is configured; neither
    target rule applies then.
    """
    if at_risk_percent is None:
        at_risk_percent = getattr(settings, "COMMISSION_AT_RISK_PERCENT", 70)
    if growth_streak is None:
        growth_streak = getattr(settings, "COMMISSION_GROWTH_STREAK_BADGE", 2)

    badges = []
    if rank == 1:
        badges.append(TOP_PERFORMER)
    if target_percent is not None and target_percent >= 100:
        badges.append(TARGET_ACHIEVED)
    if streak >= growth_streak:
        badges.append(CONSISTENT_GROWTH)
    if target_percent is not None and target_percent < at_risk_percent:
        badges.append(AT_RISK)
    return badges
