from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from commissions.models import CommissionRuleSet


def test_seed_installs_default_rule_sets(organization):
    out = StringIO()

    call_command("seed_commission_rules", organization="ORG-TEST", stdout=out)

    active = CommissionRuleSet.objects.filter(organization=organization, is_active=True)
    assert sorted(active.values_list("type", flat=True)) == ["dispatch", "sales"]
    assert active.get(type="sales").tiers.count() == 10
    assert active.get(type="dispatch").tiers.count() == 5
    assert "[CREATE] sales" in out.getvalue()


def test_seed_skips_existing_rules(organization, sales_rules):
    out = StringIO()

    call_command("seed_commission_rules", organization="ORG-TEST", stdout=out)

    assert "[SKIP] sales" in out.getvalue()
    assert CommissionRuleSet.objects.filter(type="sales").count() == 1


def test_seed_replace_bumps_version(organization, sales_rules):
    call_command("seed_commission_rules", organization="ORG-TEST", replace=True, stdout=StringIO())

    active = CommissionRuleSet.objects.get(organization=organization, type="sales", is_active=True)
    assert active.version == 2


def test_seed_unknown_organization(db):
    with pytest.raises(CommandError):
        call_command("seed_commission_rules", organization="NOPE", stdout=StringIO())
