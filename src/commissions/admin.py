"""Django admin for the commission engine."""
from django.contrib import admin

from commissions.models import (
    CommissionBonus,
    CommissionRuleSet,
    CommissionTier,
    DepartmentTarget,
    MonthlyActivity,
    MonthlyCommission,
)


class CommissionTierInline(admin.TabularInline):
    model = CommissionTier
    extra = 0
    ordering = ("position",)
    fields = ("position", "label", "min_value", "max_value", "fixed_amount", "percentage")


@admin.register(CommissionRuleSet)
class CommissionRuleSetAdmin(admin.ModelAdmin):
    list_display = ("organization", "type", "name", "version", "is_active", "updated_at")
    list_filter = ("is_active", "type", "organization")
    search_fields = ("name", "organization__name", "organization__code")
    inlines = [CommissionTierInline]
    readonly_fields = ("version", "created_at", "updated_at")


@admin.register(MonthlyActivity)
class MonthlyActivityAdmin(admin.ModelAdmin):
    list_display = ("user", "month", "active_leads", "gross_revenue", "updated_at")
    list_filter = ("month",)
    search_fields = ("user__email", "user__first_name", "user__last_name")
    raw_id_fields = ("user",)


@admin.register(CommissionBonus)
class CommissionBonusAdmin(admin.ModelAdmin):
    list_display = ("user", "month", "bonus_type", "amount")
    list_filter = ("bonus_type", "month")
    search_fields = ("user__email", "note")
    raw_id_fields = ("user",)


@admin.register(DepartmentTarget)
class DepartmentTargetAdmin(admin.ModelAdmin):
    list_display = ("organization", "department", "month", "amount")
    list_filter = ("department", "organization")


@admin.register(MonthlyCommission)
class MonthlyCommissionAdmin(admin.ModelAdmin):
    list_display = (
        "user", "organization", "month", "department",
        "tier_label", "base_commission", "total_commission", "last_trigger",
    )
    list_filter = ("department", "month", "organization")
    search_fields = ("user__email", "user__first_name", "user__last_name")
    list_select_related = ("user", "organization")
    readonly_fields = [f.name for f in MonthlyCommission._meta.fields]

    def has_add_permission(self, request):
        return False
