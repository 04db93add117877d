"""Django admin configuration for the organizations app."""
from django.contrib import admin

from organizations.models import Organization, OrganizationMember


class OrganizationMemberInline(admin.TabularInline):
    model = OrganizationMember
    extra = 0
    raw_id_fields = ("user",)
    fields = ("user", "department", "is_team_lead", "is_active")


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ("name", "code", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name", "code")
    readonly_fields = ("id", "created_at", "updated_at")
    inlines = [OrganizationMemberInline]


@admin.register(OrganizationMember)
class OrganizationMemberAdmin(admin.ModelAdmin):
    list_display = ("user", "organization", "department", "is_team_lead", "is_active")
    list_filter = ("department", "is_team_lead", "is_active", "organization")
    search_fields = ("user__email", "user__first_name", "user__last_name", "organization__name")
    raw_id_fields = ("user", "organization")
    list_select_related = ("user", "organization")
