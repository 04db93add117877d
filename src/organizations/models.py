"""Models for the organizations app."""
from django.conf import settings
from django.db import models

from core.models import TimeStampedModel


class Department(models.TextChoices):
    SALES = "sales", "Sales"
    DISPATCH = "dispatch", "Dispatch"


class Organization(TimeStampedModel):
    """Tenant owning commission rules, targets and members."""

    name = models.CharField("name", max_length=255)
    code = models.CharField("code", max_length=50, unique=True)
    is_active = models.BooleanField("active", default=True, db_index=True)

    class Meta:
        ordering = ["name"]
        verbose_name = "organization"
        verbose_name_plural = "organizations"

    def __str__(self):
        return self.name


class OrganizationMember(TimeStampedModel):
    """Links a user to their organization and commission department."""

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="members",
    )
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="membership",
    )
    department = models.CharField(
        "department",
        max_length=20,
        choices=Department.choices,
        db_index=True,
    )
    is_team_lead = models.BooleanField("team lead", default=False)
    is_active = models.BooleanField("active", default=True, db_index=True)

    class Meta:
        ordering = ["organization", "department"]
        verbose_name = "organization member"
        verbose_name_plural = "organization members"
        indexes = [
            models.Index(
                fields=["organization", "department", "is_active"],
                name="idx_member_org_dept_active",
            ),
        ]

    def __str__(self):
        return f"{self.user} @ {self.organization} ({self.department})"
