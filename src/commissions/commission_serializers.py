"""DRF Serializers for the commission engine."""
from __future__ import annotations

from rest_framework import serializers

from commissions.exceptions import InvalidRuleSetError
from commissions.models import CommissionRuleSet, CommissionTier, MonthlyCommission
from commissions.periods import validate_month
from commissions.services import create_rule_set
from commissions.tiers import Tier, validate_tiers
from organizations.models import Department


def _month_field_validator(value):
    try:
        return validate_month(value)
    except ValueError as exc:
        raise serializers.ValidationError(str(exc)) from exc


# ────────────────────────────────────────────────────────────
# Tiers & Rule sets
# ────────────────────────────────────────────────────────────

class CommissionTierSerializer(serializers.ModelSerializer):
    class Meta:
        model = CommissionTier
        fields = [
            "id", "position", "label", "min_value", "max_value",
            "fixed_amount", "percentage",
        ]
        read_only_fields = ["id", "position"]


class CommissionRuleSetSerializer(serializers.ModelSerializer):
    tiers = CommissionTierSerializer(many=True, read_only=True)

    class Meta:
        model = CommissionRuleSet
        fields = [
            "id", "organization", "type", "name", "version", "is_active",
            "updated_by", "tiers", "created_at", "updated_at",
        ]
        read_only_fields = fields


class CommissionRuleSetWriteSerializer(serializers.ModelSerializer):
    """Used for create/update. Tiers are given in ascending order; update creates a new version."""

    tiers = CommissionTierSerializer(many=True)

    class Meta:
        model = CommissionRuleSet
        fields = ["type", "name", "tiers"]

    def validate(self, attrs):
        commission_type = attrs.get("type") or getattr(self.instance, "type", None)
        if self.instance is not None and commission_type != self.instance.type:
            raise serializers.ValidationError({"type": "The type of a rule set cannot change."})

        tiers = attrs.get("tiers")
        if tiers is None and self.instance is not None:
            tiers = self._existing_tiers(self.instance)
            attrs["tiers"] = tiers
        try:
            validate_tiers(commission_type, [Tier(**tier) for tier in tiers or []])
        except InvalidRuleSetError as exc:
            raise serializers.ValidationError({"tiers": str(exc)}) from exc
        return attrs

    def create(self, validated_data):
        return create_rule_set(
            validated_data["organization"],
            validated_data["type"],
            [dict(tier) for tier in validated_data["tiers"]],
            name=validated_data.get("name", ""),
            updated_by=validated_data.get("updated_by"),
        )

    def update(self, instance, validated_data):
        # Versioning: the old rule set is deactivated, never edited in place.
        return create_rule_set(
            instance.organization,
            instance.type,
            [dict(tier) for tier in validated_data["tiers"]],
            name=validated_data.get("name", instance.name),
            updated_by=validated_data.get("updated_by"),
        )

    def to_representation(self, instance):
        return CommissionRuleSetSerializer(instance, context=self.context).data

    @staticmethod
    def _existing_tiers(instance):
        return list(
            instance.tiers.order_by("position").values(
                "label", "min_value", "max_value", "fixed_amount", "percentage",
            )
        )


# ────────────────────────────────────────────────────────────
# Monthly records
# ────────────────────────────────────────────────────────────

class MonthlyCommissionSerializer(serializers.ModelSerializer):
    user_name = serializers.SerializerMethodField()

    class Meta:
        model = MonthlyCommission
        fields = [
            "id", "user", "user_name", "organization", "month", "department",
            "active_leads", "invoice_total", "tier_label", "tier_fixed",
            "tier_pct", "penalty_pct", "base_commission", "bonuses",
            "total_commission", "last_trigger", "updated_at",
        ]
        read_only_fields = fields

    def get_user_name(self, obj) -> str:
        return obj.user.get_full_name() or obj.user.email


# ────────────────────────────────────────────────────────────
# Engine requests
# ────────────────────────────────────────────────────────────

class ComputeRequestSerializer(serializers.Serializer):
    user = serializers.UUIDField(required=False)
    month = serializers.CharField(validators=[_month_field_validator])


class RecomputeRequestSerializer(serializers.Serializer):
    user = serializers.UUIDField(required=False)
    month = serializers.CharField(required=False, validators=[_month_field_validator])


class LeaderboardQuerySerializer(serializers.Serializer):
    month = serializers.CharField(required=False, validators=[_month_field_validator])
    type = serializers.ChoiceField(choices=Department.choices, required=False)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500)


class MetricsQuerySerializer(serializers.Serializer):
    user = serializers.UUIDField(required=False)
    month = serializers.CharField(required=False, validators=[_month_field_validator])
