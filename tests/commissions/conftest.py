from decimal import Decimal

import pytest

from commissions.engine import CommissionAggregator
from commissions.exceptions import CommissionConfigurationError, UnknownMemberError
from commissions.records import Membership
from commissions.repository import CommissionRepository
from commissions.tiers import ZERO, TierReward


class InMemoryCommissionRepository(CommissionRepository):
    """Dict-backed repository for exercising the engine without the ORM."""

    def __init__(self):
        self.rule_sets = {}
        self.members = {}
        self.activity = {}
        self.bonuses = {}
        self.targets = {}
        self.snapshots = {}
        self.writes = []
        self.snapshot_reads = []

    def get_activity_metric(self, user_id, month, commission_type):
        return self.activity.get((user_id, month), 0)

    def get_rule_set(self, organization_id, commission_type):
        try:
            return self.rule_sets[(organization_id, commission_type)]
        except KeyError:
            raise CommissionConfigurationError(organization_id, commission_type)

    def get_snapshot(self, user_id, month):
        self.snapshot_reads.append(user_id)
        return self.snapshots.get((user_id, month))

    def put_snapshot(self, record, trigger=None):
        self.snapshots[(record.user_id, record.month)] = record
        self.writes.append((record, trigger))
        return record

    def get_department_target(self, organization_id, commission_type, month):
        return self.targets.get((organization_id, commission_type, month), ZERO)

    def get_cohort_users(self, organization_id, commission_type):
        return [
            user_id
            for user_id, member in self.members.items()
            if member.organization_id == organization_id and member.department == commission_type
        ]

    def get_member(self, user_id):
        try:
            return self.members[user_id]
        except KeyError:
            raise UnknownMemberError(user_id)

    def get_bonuses(self, user_id, month):
        return dict(self.bonuses.get((user_id, month), {}))

    def list_snapshots(self, organization_id, month, commission_type=None):
        return [
            record
            for record in self.snapshots.values()
            if record.organization_id == organization_id
            and record.month == month
            and (commission_type is None or record.department == commission_type)
        ]

    # Test helpers

    def add_member(self, user_id, department="sales", organization_id="org-1", is_team_lead=False):
        self.members[user_id] = Membership(
            organization_id=organization_id,
            department=department,
            is_team_lead=is_team_lead,
        )

    def add_snapshot(self, user_id, month, total, department="sales", organization_id="org-1"):
        record = CommissionAggregator.build_record(
            user_id=user_id,
            organization_id=organization_id,
            month=month,
            department=department,
            metric=0,
            reward=TierReward(tier=None, base_commission=Decimal(str(total)), penalty_pct=ZERO),
            bonuses={},
        )
        self.snapshots[(user_id, month)] = record
        return record


@pytest.fixture
def memory_repo():
    return InMemoryCommissionRepository()
