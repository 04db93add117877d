import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import commissions.models

DEPARTMENT_CHOICES = [("sales", "Sales"), ("dispatch", "Dispatch")]


def _timestamps():
    return [
        ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
        ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
    ]


def _month_field():
    return models.CharField(
        max_length=7,
        validators=[commissions.models.validate_month_key],
        verbose_name="month (YYYY-MM)",
    )


def _money(verbose_name, **kwargs):
    return models.DecimalField(
        decimal_places=2,
        default=Decimal("0"),
        max_digits=14,
        verbose_name=verbose_name,
        **kwargs,
    )


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CommissionRuleSet",
            fields=_timestamps() + [
                ("type", models.CharField(choices=DEPARTMENT_CHOICES, max_length=20, verbose_name="type")),
                ("name", models.CharField(blank=True, default="", max_length=120, verbose_name="name")),
                ("version", models.PositiveIntegerField(default=1, verbose_name="version")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="commission_rule_sets",
                        to="organizations.organization",
                        verbose_name="organization",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "commission rule set",
                "verbose_name_plural": "commission rule sets",
                "ordering": ["organization", "type", "-version"],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(is_active=True),
                        fields=("organization", "type"),
                        name="uniq_active_rule_set_per_org_type",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="CommissionTier",
            fields=_timestamps() + [
                ("position", models.PositiveSmallIntegerField(verbose_name="position")),
                ("label", models.CharField(blank=True, default="", max_length=60, verbose_name="label")),
                (
                    "min_value",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="lower bound",
                    ),
                ),
                (
                    "max_value",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Leave empty for sales thresholds and for the last dispatch band.",
                        max_digits=14,
                        null=True,
                        verbose_name="upper bound",
                    ),
                ),
                (
                    "fixed_amount",
                    _money(
                        "fixed amount",
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "percentage",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("0"),
                        help_text="Negative values mark a below-floor penalty.",
                        max_digits=6,
                        verbose_name="percentage",
                    ),
                ),
                (
                    "rule_set",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="tiers",
                        to="commissions.commissionruleset",
                        verbose_name="rule set",
                    ),
                ),
            ],
            options={
                "verbose_name": "commission tier",
                "verbose_name_plural": "commission tiers",
                "ordering": ["position"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("rule_set", "position"),
                        name="uniq_tier_position_per_rule_set",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MonthlyActivity",
            fields=_timestamps() + [
                ("month", _month_field()),
                ("active_leads", models.PositiveIntegerField(default=0, verbose_name="active leads")),
                (
                    "gross_revenue",
                    _money(
                        "gross revenue",
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="monthly_activities",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "monthly activity",
                "verbose_name_plural": "monthly activities",
                "ordering": ["-month"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "month"), name="uniq_activity_user_month"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CommissionBonus",
            fields=_timestamps() + [
                ("month", _month_field()),
                (
                    "bonus_type",
                    models.CharField(
                        choices=[
                            ("rep_of_month", "Rep of the month"),
                            ("active_fleet", "Active fleet"),
                            ("team_lead", "Team lead"),
                            ("own_lead", "Own lead"),
                            ("new_lead", "New lead"),
                            ("first_two_weeks", "First two weeks invoicing"),
                        ],
                        max_length=30,
                        verbose_name="bonus type",
                    ),
                ),
                (
                    "amount",
                    _money(
                        "amount",
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("note", models.CharField(blank=True, default="", max_length=255, verbose_name="note")),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="commission_bonuses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "commission bonus",
                "verbose_name_plural": "commission bonuses",
                "ordering": ["-month", "bonus_type"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("user", "month", "bonus_type"),
                        name="uniq_bonus_user_month_type",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="DepartmentTarget",
            fields=_timestamps() + [
                ("department", models.CharField(choices=DEPARTMENT_CHOICES, max_length=20, verbose_name="department")),
                ("month", _month_field()),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                        verbose_name="target amount",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="department_targets",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "verbose_name": "department target",
                "verbose_name_plural": "department targets",
                "ordering": ["-month", "department"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("organization", "department", "month"),
                        name="uniq_target_org_department_month",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="MonthlyCommission",
            fields=_timestamps() + [
                ("month", _month_field()),
                ("department", models.CharField(choices=DEPARTMENT_CHOICES, max_length=20, verbose_name="department")),
                ("active_leads", models.PositiveIntegerField(default=0, verbose_name="active leads")),
                ("invoice_total", _money("invoice total")),
                ("tier_label", models.CharField(blank=True, default="", max_length=60, verbose_name="applied tier")),
                ("tier_fixed", _money("tier fixed amount")),
                ("tier_pct", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=6, verbose_name="tier percentage")),
                ("penalty_pct", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=6, verbose_name="penalty percentage")),
                ("base_commission", _money("base commission")),
                ("bonuses", models.JSONField(blank=True, default=dict, verbose_name="bonuses")),
                ("total_commission", _money("total commission")),
                (
                    "last_trigger",
                    models.CharField(
                        choices=[
                            ("MANUAL", "Manual"),
                            ("SIGNAL", "Data change"),
                            ("SCHEDULED", "Scheduled"),
                            ("ON_DEMAND", "On demand"),
                        ],
                        default="MANUAL",
                        max_length=20,
                        verbose_name="last trigger",
                    ),
                ),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="monthly_commissions",
                        to="organizations.organization",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="monthly_commissions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "monthly commission",
                "verbose_name_plural": "monthly commissions",
                "ordering": ["-month", "-total_commission"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "month"), name="uniq_commission_user_month"),
                ],
                "indexes": [
                    models.Index(
                        fields=["organization", "month", "department"],
                        name="idx_commission_org_month_dept",
                    ),
                ],
            },
        ),
    ]
