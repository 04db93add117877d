"""Models for the commission engine."""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from commissions.exceptions import InvalidRuleSetError
from commissions.periods import MONTH_RE
from commissions.tiers import Tier, validate_tiers
from core.models import TimeStampedModel
from organizations.models import Department


def validate_month_key(value):
    if not MONTH_RE.match(value or ""):
        raise ValidationError("Month must use the YYYY-MM format.")


class CommissionRuleSet(TimeStampedModel):
    """Versioned, ordered tier list for one organization and department.

    Business rule: only one active rule set per (organization, type).
    Updating through the API deactivates the old version and creates a new one.
    """

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="commission_rule_sets",
        verbose_name="organization",
    )
    type = models.CharField("type", max_length=20, choices=Department.choices)
    name = models.CharField("name", max_length=120, blank=True, default="")
    version = models.PositiveIntegerField("version", default=1)
    is_active = models.BooleanField("active", default=True, db_index=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta:
        verbose_name = "commission rule set"
        verbose_name_plural = "commission rule sets"
        ordering = ["organization", "type", "-version"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "type"],
                condition=models.Q(is_active=True),
                name="uniq_active_rule_set_per_org_type",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_type_display()} rules v{self.version} ({self.organization})"

    def as_tiers(self) -> list:
        return [tier.as_tier() for tier in self.tiers.order_by("position")]

    def clean(self) -> None:
        if not self.pk:
            return
        try:
            validate_tiers(self.type, self.as_tiers())
        except InvalidRuleSetError as exc:
            raise ValidationError(str(exc)) from exc


class CommissionTier(TimeStampedModel):
    """One band (dispatch) or threshold (sales) inside a rule set."""

    rule_set = models.ForeignKey(
        CommissionRuleSet,
        on_delete=models.CASCADE,
        related_name="tiers",
        verbose_name="rule set",
    )
    position = models.PositiveSmallIntegerField("position")
    label = models.CharField("label", max_length=60, blank=True, default="")
    min_value = models.DecimalField(
        "lower bound",
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )
    max_value = models.DecimalField(
        "upper bound",
        max_digits=14,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Leave empty for sales thresholds and for the last dispatch band.",
    )
    fixed_amount = models.DecimalField(
        "fixed amount",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    percentage = models.DecimalField(
        "percentage",
        max_digits=6,
        decimal_places=2,
        default=Decimal("0"),
        help_text="Negative values mark a below-floor penalty.",
    )

    class Meta:
        verbose_name = "commission tier"
        verbose_name_plural = "commission tiers"
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(
                fields=["rule_set", "position"],
                name="uniq_tier_position_per_rule_set",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.as_tier().display_label} ({self.rule_set})"

    def as_tier(self) -> Tier:
        return Tier(
            min_value=self.min_value,
            max_value=self.max_value,
            fixed_amount=self.fixed_amount,
            percentage=self.percentage,
            label=self.label,
        )


class MonthlyActivity(TimeStampedModel):
    """Upstream-supplied activity for one user and month."""

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="monthly_activities",
    )
    month = models.CharField("month (YYYY-MM)", max_length=7, validators=[validate_month_key])
    active_leads = models.PositiveIntegerField("active leads", default=0)
    gross_revenue = models.DecimalField(
        "gross revenue",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta:
        verbose_name = "monthly activity"
        verbose_name_plural = "monthly activities"
        ordering = ["-month"]
        constraints = [
            models.UniqueConstraint(fields=["user", "month"], name="uniq_activity_user_month"),
        ]

    def __str__(self) -> str:
        return f"{self.user} - {self.month}"


class CommissionBonus(TimeStampedModel):
    """A named, discretionary bonus amount added on top of the tier reward."""

    class BonusType(models.TextChoices):
        REP_OF_MONTH = "rep_of_month", "Rep of the month"
        ACTIVE_FLEET = "active_fleet", "Active fleet"
        TEAM_LEAD = "team_lead", "Team lead"
        OWN_LEAD = "own_lead", "Own lead"
        NEW_LEAD = "new_lead", "New lead"
        FIRST_TWO_WEEKS = "first_two_weeks", "First two weeks invoicing"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="commission_bonuses",
    )
    month = models.CharField("month (YYYY-MM)", max_length=7, validators=[validate_month_key])
    bonus_type = models.CharField("bonus type", max_length=30, choices=BonusType.choices)
    amount = models.DecimalField(
        "amount",
        max_digits=14,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
    )
    note = models.CharField("note", max_length=255, blank=True, default="")

    class Meta:
        verbose_name = "commission bonus"
        verbose_name_plural = "commission bonuses"
        ordering = ["-month", "bonus_type"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "month", "bonus_type"],
                name="uniq_bonus_user_month_type",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.get_bonus_type_display()} {self.amount} - {self.user} {self.month}"


class DepartmentTarget(TimeStampedModel):
    """Monthly commission target for a whole department."""

    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="department_targets",
    )
    department = models.CharField("department", max_length=20, choices=Department.choices)
    month = models.CharField("month (YYYY-MM)", max_length=7, validators=[validate_month_key])
    amount = models.DecimalField(
        "target amount",
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
    )

    class Meta:
        verbose_name = "department target"
        verbose_name_plural = "department targets"
        ordering = ["-month", "department"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "department", "month"],
                name="uniq_target_org_department_month",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.organization} {self.department} {self.month}: {self.amount}"


class MonthlyCommission(TimeStampedModel):
    """Persisted commission snapshot, one per user and month."""

    class TriggerSource(models.TextChoices):
        MANUAL = "MANUAL", "Manual"
        SIGNAL = "SIGNAL", "Data change"
        SCHEDULED = "SCHEDULED", "Scheduled"
        ON_DEMAND = "ON_DEMAND", "On demand"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="monthly_commissions",
    )
    organization = models.ForeignKey(
        "organizations.Organization",
        on_delete=models.CASCADE,
        related_name="monthly_commissions",
    )
    month = models.CharField("month (YYYY-MM)", max_length=7, validators=[validate_month_key])
    department = models.CharField("department", max_length=20, choices=Department.choices)
    active_leads = models.PositiveIntegerField("active leads", default=0)
    invoice_total = models.DecimalField(
        "invoice total", max_digits=14, decimal_places=2, default=Decimal("0"),
    )
    tier_label = models.CharField("applied tier", max_length=60, blank=True, default="")
    tier_fixed = models.DecimalField(
        "tier fixed amount", max_digits=14, decimal_places=2, default=Decimal("0"),
    )
    tier_pct = models.DecimalField(
        "tier percentage", max_digits=6, decimal_places=2, default=Decimal("0"),
    )
    penalty_pct = models.DecimalField(
        "penalty percentage", max_digits=6, decimal_places=2, default=Decimal("0"),
    )
    base_commission = models.DecimalField(
        "base commission", max_digits=14, decimal_places=2, default=Decimal("0"),
    )
    bonuses = models.JSONField("bonuses", default=dict, blank=True)
    total_commission = models.DecimalField(
        "total commission", max_digits=14, decimal_places=2, default=Decimal("0"),
    )
    last_trigger = models.CharField(
        "last trigger",
        max_length=20,
        choices=TriggerSource.choices,
        default=TriggerSource.MANUAL,
    )

    class Meta:
        verbose_name = "monthly commission"
        verbose_name_plural = "monthly commissions"
        ordering = ["-month", "-total_commission"]
        constraints = [
            models.UniqueConstraint(fields=["user", "month"], name="uniq_commission_user_month"),
        ]
        indexes = [
            models.Index(
                fields=["organization", "month", "department"],
                name="idx_commission_org_month_dept",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.user} - {self.month}: {self.total_commission}"
