"""Value types handed between the engine components."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from commissions.periods import validate_month
from commissions.tiers import COMMISSION_TYPES, SALES, ZERO

TEAM_LEAD_BONUS = "team_lead"

BONUS_TYPES = (
    "rep_of_month",
    "active_fleet",
    TEAM_LEAD_BONUS,
    "own_lead",
    "new_lead",
    "first_two_weeks",
)


@dataclass(frozen=True)
class Membership:
    organization_id: str
    department: str
    is_team_lead: bool = False


@dataclass(frozen=True)
class MonthlyCommissionRecord:
    """
    Commission snapshot for one user and month.

    New values are produced by ``CommissionAggregator`` only; repositories
    rebuild them when loading stored snapshots. Storage timestamps are not
    part of the record, so two computations over unchanged inputs compare
    equal.
    """

    user_id: str
    organization_id: str
    month: str
    department: str
    base_commission: Decimal
    total_commission: Decimal
    bonuses: dict = field(default_factory=dict)
    active_leads: int = 0
    invoice_total: Decimal = ZERO
    tier_label: str = ""
    tier_fixed: Decimal = ZERO
    tier_pct: Decimal = ZERO
    penalty_pct: Decimal = ZERO

    def __post_init__(self):
        validate_month(self.month)
        if self.department not in COMMISSION_TYPES:
            raise ValueError(f"Unknown department {self.department!r}.")
        expected = self.base_commission + sum(self.bonuses.values(), ZERO)
        if self.total_commission != expected:
            raise ValueError(
                f"total_commission {self.total_commission} != base + bonuses {expected}."
            )

    @property
    def metric(self):
        return self.active_leads if self.department == SALES else self.invoice_total

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "organization_id": self.organization_id,
            "month": self.month,
            "department": self.department,
            "active_leads": self.active_leads,
            "invoice_total": str(self.invoice_total),
            "tier_label": self.tier_label,
            "tier_fixed": str(self.tier_fixed),
            "tier_pct": str(self.tier_pct),
            "penalty_pct": str(self.penalty_pct),
            "base_commission": str(self.base_commission),
            "bonuses": {name: str(amount) for name, amount in self.bonuses.items()},
            "total_commission": str(self.total_commission),
        }


@dataclass(frozen=True)
class RankedEntry:
    user_id: str
    department: str
    total_commission: Decimal
    rank: int
    growth_percent: int
    target_percent: Optional[int]
    badges: tuple = ()
    streak: int = 0

    def as_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "department": self.department,
            "total_commission": str(self.total_commission),
            "rank": self.rank,
            "growth_percent": self.growth_percent,
            "target_percent": self.target_percent,
            "badges": list(self.badges),
            "streak": self.streak,
        }
