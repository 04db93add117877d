import pytest
from rest_framework.test import APIClient

from accounts.models import User
from commissions.defaults import DEFAULT_DISPATCH_TIERS, DEFAULT_SALES_TIERS
from commissions.services import create_rule_set
from organizations.models import Department, Organization, OrganizationMember


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        email="admin@test.com",
        password="testpass123",
        first_name="Admin",
        last_name="User",
        role=User.Role.ADMIN,
    )


@pytest.fixture
def manager_user(db):
    return User.objects.create_user(
        email="manager@test.com",
        password="testpass123",
        first_name="Manager",
        last_name="User",
        role=User.Role.MANAGER,
    )


@pytest.fixture
def sales_user(db):
    return User.objects.create_user(
        email="sales@test.com",
        password="testpass123",
        first_name="Sales",
        last_name="User",
        role=User.Role.SALES,
    )


@pytest.fixture
def other_sales_user(db):
    return User.objects.create_user(
        email="sales2@test.com",
        password="testpass123",
        first_name="Second",
        last_name="Rep",
        role=User.Role.SALES,
    )


@pytest.fixture
def dispatch_user(db):
    return User.objects.create_user(
        email="dispatch@test.com",
        password="testpass123",
        first_name="Dispatch",
        last_name="User",
        role=User.Role.DISPATCH,
    )


@pytest.fixture
def organization(db):
    return Organization.objects.create(name="Organization Test", code="ORG-TEST")


@pytest.fixture
def sales_member(organization, sales_user):
    return OrganizationMember.objects.create(
        organization=organization,
        user=sales_user,
        department=Department.SALES,
    )


@pytest.fixture
def other_sales_member(organization, other_sales_user):
    return OrganizationMember.objects.create(
        organization=organization,
        user=other_sales_user,
        department=Department.SALES,
    )


@pytest.fixture
def dispatch_member(organization, dispatch_user):
    return OrganizationMember.objects.create(
        organization=organization,
        user=dispatch_user,
        department=Department.DISPATCH,
    )


@pytest.fixture
def manager_member(organization, manager_user):
    return OrganizationMember.objects.create(
        organization=organization,
        user=manager_user,
        department=Department.SALES,
        is_team_lead=True,
    )


@pytest.fixture
def sales_rules(organization):
    return create_rule_set(
        organization,
        Department.SALES,
        [dict(tier) for tier in DEFAULT_SALES_TIERS],
        name="Sales rules",
    )


@pytest.fixture
def dispatch_rules(organization):
    return create_rule_set(
        organization,
        Department.DISPATCH,
        [dict(tier) for tier in DEFAULT_DISPATCH_TIERS],
        name="Dispatch rules",
    )


@pytest.fixture
def api_client():
    return APIClient()
