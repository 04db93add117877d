"""Tier resolution: map one activity metric to a reward.

Two rule-set shapes:

- ``sales``: a staircase of lead-count thresholds starting at ``0``. The
  highest threshold not above the metric wins. The ``0`` threshold is the
  below-floor tier and may carry a negative percentage (a penalty).
- ``dispatch``: closed revenue bands ``[min, max]``, the last one open-ended.
  The band containing the revenue wins. Consecutive bands are at most one
  unit apart (``[651, 850]``, ``[851, 1500]``); a fractional revenue inside
  that seam (``850.40``) stays on the lower band. A revenue below the first
  band matches nothing and carries the rule set's floor penalty.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence

from commissions.exceptions import InvalidRuleSetError

logger = logging.getLogger(__name__)

SALES = "sales"
DISPATCH = "dispatch"
COMMISSION_TYPES = (SALES, DISPATCH)

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def quantize_money(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Tier:
    """One reward rule. ``max_value`` is ``None`` for staircase or open-ended tiers."""

    min_value: Decimal
    max_value: Optional[Decimal] = None
    fixed_amount: Decimal = ZERO
    percentage: Decimal = ZERO
    label: str = ""

    @property
    def display_label(self) -> str:
        if self.label:
            return self.label
        if self.max_value is None:
            return f"{self.min_value}+"
        return f"{self.min_value}-{self.max_value}"


@dataclass(frozen=True)
class RuleSet:
    organization_id: str
    commission_type: str
    tiers: tuple
    version: int = 1
    # Recorded as penalty_pct when a dispatch revenue is below the first band.
    floor_penalty_pct: Decimal = ZERO


@dataclass(frozen=True)
class TierReward:
    """The matched tier and the money it yields for a given metric."""

    tier: Optional[Tier]
    base_commission: Decimal
    penalty_pct: Decimal

    @property
    def label(self) -> str:
        return self.tier.display_label if self.tier else ""

    @property
    def fixed_amount(self) -> Decimal:
        return self.tier.fixed_amount if self.tier else ZERO

    @property
    def percentage(self) -> Decimal:
        return self.tier.percentage if self.tier else ZERO


def validate_tiers(commission_type: str, tiers: Sequence[Tier]) -> None:
    """Raise ``InvalidRuleSetError`` when ``tiers`` is not a usable rule set."""
    if commission_type not in COMMISSION_TYPES:
        raise InvalidRuleSetError(f"Unknown commission type {commission_type!r}.")
    if not tiers:
        raise InvalidRuleSetError("At least one tier is required.")
    if commission_type == SALES and tiers[0].min_value != 0:
        raise InvalidRuleSetError("Sales tiers must start with a below-floor tier at threshold 0.")

    previous = None
    for index, tier in enumerate(tiers):
        if tier.min_value < 0:
            raise InvalidRuleSetError("Tier lower bounds cannot be negative.")
        if tier.fixed_amount < 0:
            raise InvalidRuleSetError("Fixed amounts cannot be negative.")
        if tier.percentage < 0 and index != 0:
            raise InvalidRuleSetError("Only the first tier may carry a negative percentage.")

        if commission_type == DISPATCH:
            is_last = index == len(tiers) - 1
            if tier.max_value is None and not is_last:
                raise InvalidRuleSetError("Only the last dispatch band may be unbounded.")
            if tier.max_value is not None and tier.max_value < tier.min_value:
                raise InvalidRuleSetError(
                    f"Band {tier.display_label}: max must not be lower than min."
                )
            if is_last and tier.max_value is not None:
                raise InvalidRuleSetError("The last dispatch band must be open-ended.")
        elif tier.max_value is not None:
            raise InvalidRuleSetError("Sales tiers are thresholds and take no max value.")

        if previous is not None:
            if tier.min_value <= previous.min_value:
                raise InvalidRuleSetError("Tier lower bounds must be strictly ascending.")
            if commission_type == DISPATCH and tier.min_value <= previous.max_value:
                raise InvalidRuleSetError(
                    f"Bands {previous.display_label} and {tier.display_label} overlap."
                )
            if commission_type == DISPATCH and tier.min_value - previous.max_value > 1:
                raise InvalidRuleSetError(
                    f"Bands {previous.display_label} and {tier.display_label} leave a gap."
                )
            if tier.fixed_amount < previous.fixed_amount:
                raise InvalidRuleSetError("Fixed amounts must not decrease along the tiers.")
            if tier.percentage < previous.percentage:
                raise InvalidRuleSetError("Percentages must not decrease along the tiers.")
        previous = tier


def determine_tier(metric, tiers: Iterable[Tier]) -> Optional[Tier]:
    """Return the tier with the highest lower bound <= ``metric``."""
    reached = None
    for tier in sorted(tiers, key=lambda t: t.min_value):
        if metric >= tier.min_value:
            reached = tier
    return reached


def determine_band(metric, bands: Iterable[Tier]) -> Optional[Tier]:
    """
    Return the band with ``min <= metric <= max`` (``max=None`` is open-ended).

    A metric strictly between two bands that are less than one unit apart
    resolves to the lower band; any other metric outside every band
    resolves to ``None``.
    """
    ordered = sorted(bands, key=lambda b: b.min_value)
    for index, band in enumerate(ordered):
        if metric < band.min_value:
            lower = ordered[index - 1] if index else None
            if lower is not None and metric < lower.max_value + 1:
                return lower
            return None
        if band.max_value is None or metric <= band.max_value:
            return band
    return None


def compute_reward(rule_set: RuleSet, metric) -> TierReward:
    """
    Resolve ``metric`` against ``rule_set`` and turn the tier into money.

    ``base = fixed + basis * pct / 100`` where the basis is the revenue for
    dispatch and the tier's fixed amount for sales. A negative percentage is
    not applied; it is reported back as ``penalty_pct``.
    """
    metric = Decimal(metric)
    if rule_set.commission_type == DISPATCH:
        tier = determine_band(metric, rule_set.tiers)
    else:
        tier = determine_tier(metric, rule_set.tiers)
    if tier is None:
        logger.debug(
            "No %s tier for metric=%s org=%s",
            rule_set.commission_type,
            metric,
            rule_set.organization_id,
        )
        return TierReward(
            tier=None,
            base_commission=quantize_money(ZERO),
            penalty_pct=rule_set.floor_penalty_pct,
        )

    base = tier.fixed_amount
    penalty_pct = ZERO
    if tier.percentage >= 0:
        basis = metric if rule_set.commission_type == DISPATCH else tier.fixed_amount
        base += basis * tier.percentage / HUNDRED
    else:
        penalty_pct = tier.percentage

    logger.debug(
        "Resolved %s tier %s for metric=%s org=%s",
        rule_set.commission_type,
        tier.display_label,
        metric,
        rule_set.organization_id,
    )
    return TierReward(tier=tier, base_commission=quantize_money(base), penalty_pct=penalty_pct)
