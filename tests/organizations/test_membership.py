import pytest
from django.db import IntegrityError

from commissions.repository import DjangoCommissionRepository
from organizations.models import Department, Organization, OrganizationMember


def test_member_string(sales_member):
    assert "Organization Test" in str(sales_member)
    assert "sales" in str(sales_member)


def test_user_belongs_to_one_organization(sales_member, sales_user):
    other = Organization.objects.create(name="Other", code="ORG-2")
    with pytest.raises(IntegrityError):
        OrganizationMember.objects.create(
            organization=other, user=sales_user, department=Department.DISPATCH,
        )


def test_cohort_excludes_inactive_members_and_users(
    organization, sales_member, other_sales_member, dispatch_member, manager_member, other_sales_user,
):
    repository = DjangoCommissionRepository()
    other_sales_user.is_active = False
    other_sales_user.save()
    manager_member.is_active = False
    manager_member.save()

    cohort = repository.get_cohort_users(organization.id, Department.SALES)

    assert cohort == [str(sales_member.user_id)]
    assert repository.get_cohort_users(organization.id, Department.DISPATCH) == [str(dispatch_member.user_id)]


def test_membership_lookup(sales_member, sales_user, organization):
    membership = DjangoCommissionRepository().get_member(sales_user.id)

    assert membership.organization_id == str(organization.id)
    assert membership.department == "sales"
    assert membership.is_team_lead is False
