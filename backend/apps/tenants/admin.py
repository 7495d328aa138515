"""
Admin for tenants app.
"""
from django.contrib import admin

from apps.tenants.models import Organization, OrganizationMembership


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    """Admin for Organization."""

    list_display = ["id", "name", "created_at"]
    search_fields = ["name"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(OrganizationMembership)
class OrganizationMembershipAdmin(admin.ModelAdmin):
    """Admin for OrganizationMembership."""

    list_display = ["id", "user", "organization", "role", "is_active"]
    list_filter = ["role", "is_active"]
    search_fields = ["organization__name"]
    readonly_fields = ["id", "created_at", "updated_at"]
