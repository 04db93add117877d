"""Tests for the monthly commission aggregator."""
from decimal import Decimal

import pytest

from commissions.engine import CommissionAggregator
from commissions.exceptions import CommissionConfigurationError, UnknownMemberError
from commissions.records import BONUS_TYPES
from commissions.tiers import DISPATCH, SALES, RuleSet, Tier

MONTH = "2026-03"


@pytest.fixture
def sales_repo(memory_repo):
    memory_repo.add_member("u-1", department=SALES)
    memory_repo.rule_sets[("org-1", SALES)] = RuleSet(
        organization_id="org-1",
        commission_type=SALES,
        tiers=(
            Tier(min_value=Decimal("0"), percentage=Decimal("-25"), label="Below floor"),
            Tier(min_value=Decimal("2"), fixed_amount=Decimal("5000")),
            Tier(min_value=Decimal("5"), fixed_amount=Decimal("21500")),
        ),
    )
    return memory_repo


class TestCommissionAggregator:
    def test_base_plus_bonuses(self, sales_repo):
        sales_repo.activity[("u-1", MONTH)] = 4
        sales_repo.bonuses[("u-1", MONTH)] = {
            "rep_of_month": Decimal("2000"),
            "own_lead": Decimal("1500.50"),
        }

        record = CommissionAggregator(sales_repo).compute("u-1", MONTH)

        assert record.base_commission == Decimal("5000.00")
        assert record.total_commission == Decimal("8500.50")
        assert record.active_leads == 4
        assert record.tier_label == "2+"
        assert record.tier_fixed == Decimal("5000")
        assert set(record.bonuses) == set(BONUS_TYPES)
        assert record.bonuses["team_lead"] == Decimal("0.00")
        assert sales_repo.get_snapshot("u-1", MONTH) == record

    def test_unknown_bonus_names_are_ignored(self, sales_repo):
        sales_repo.activity[("u-1", MONTH)] = 2
        sales_repo.bonuses[("u-1", MONTH)] = {"spot_award": Decimal("999")}

        record = CommissionAggregator(sales_repo).compute("u-1", MONTH)

        assert record.total_commission == Decimal("5000.00")
        assert "spot_award" not in record.bonuses

    def test_missing_activity_counts_as_zero(self, sales_repo):
        record = CommissionAggregator(sales_repo).compute("u-1", MONTH)

        assert record.active_leads == 0
        assert record.tier_label == "Below floor"
        assert record.penalty_pct == Decimal("-25")
        assert record.base_commission == Decimal("0.00")
        assert record.total_commission == Decimal("0.00")

    def test_team_lead_bonus_counts_for_team_leads(self, sales_repo):
        sales_repo.add_member("lead-1", department=SALES, is_team_lead=True)
        sales_repo.activity[("lead-1", MONTH)] = 2
        sales_repo.bonuses[("lead-1", MONTH)] = {"team_lead": Decimal("4000")}

        record = CommissionAggregator(sales_repo).compute("lead-1", MONTH)

        assert record.bonuses["team_lead"] == Decimal("4000.00")
        assert record.total_commission == Decimal("9000.00")

    def test_team_lead_bonus_is_dropped_for_other_members(self, sales_repo):
        sales_repo.activity[("u-1", MONTH)] = 2
        sales_repo.bonuses[("u-1", MONTH)] = {
            "team_lead": Decimal("4000"),
            "new_lead": Decimal("200"),
        }

        record = CommissionAggregator(sales_repo).compute("u-1", MONTH)

        assert record.bonuses["team_lead"] == Decimal("0.00")
        assert record.total_commission == Decimal("5200.00")

    def test_recompute_is_idempotent(self, sales_repo):
        sales_repo.activity[("u-1", MONTH)] = 5
        sales_repo.bonuses[("u-1", MONTH)] = {"new_lead": Decimal("300")}
        aggregator = CommissionAggregator(sales_repo)

        first = aggregator.compute("u-1", MONTH)
        second = aggregator.compute("u-1", MONTH)

        assert first == second
        assert len(sales_repo.snapshots) == 1

    def test_dispatch_uses_revenue(self, memory_repo):
        memory_repo.add_member("d-1", department=DISPATCH)
        memory_repo.rule_sets[("org-1", DISPATCH)] = RuleSet(
            organization_id="org-1",
            commission_type=DISPATCH,
            tiers=(
                Tier(min_value=Decimal("651"), max_value=Decimal("850"), percentage=Decimal("2.5")),
                Tier(min_value=Decimal("3701"), percentage=Decimal("15")),
            ),
        )
        memory_repo.activity[("d-1", MONTH)] = Decimal("4000")

        record = CommissionAggregator(memory_repo).compute("d-1", MONTH, trigger="MANUAL")

        assert record.invoice_total == Decimal("4000.00")
        assert record.active_leads == 0
        assert record.tier_pct == Decimal("15")
        assert record.base_commission == Decimal("600.00")
        assert memory_repo.writes[-1][1] == "MANUAL"

    def test_missing_rule_set_raises_configuration_error(self, memory_repo):
        memory_repo.add_member("u-2", department=SALES)

        with pytest.raises(CommissionConfigurationError) as excinfo:
            CommissionAggregator(memory_repo).compute("u-2", MONTH)

        assert excinfo.value.commission_type == SALES
        assert memory_repo.snapshots == {}

    def test_unknown_member(self, memory_repo):
        with pytest.raises(UnknownMemberError):
            CommissionAggregator(memory_repo).compute("ghost", MONTH)

    @pytest.mark.parametrize("month", ["2026-3", "2026-13", "March", "", "2026/03"])
    def test_malformed_month(self, sales_repo, month):
        with pytest.raises(ValueError):
            CommissionAggregator(sales_repo).compute("u-1", month)
