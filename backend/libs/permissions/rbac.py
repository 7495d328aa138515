"""
Organization membership checks.
"""
from __future__ import annotations

from rest_framework.permissions import BasePermission

from apps.tenants.models import OrganizationMembership


def has_org_access(user, organization_id) -> bool:
    """
    Check if user is an active member of the organization.

    Args:
        user: User instance
        organization_id: Organization UUID (or string)

    Returns:
        True if an active membership exists
    """
    if not user or not user.is_authenticated or not organization_id:
        return False
    return OrganizationMembership.objects.filter(
        user=user,
        organization_id=organization_id,
        is_active=True,
    ).exists()


class IsOrganizationMember(BasePermission):
    """Allow access to ``orgs/<org_id>/...`` routes only for members of that org."""

    message = "You are not a member of this organization."

    def has_permission(self, request, view) -> bool:
        org_id = view.kwargs.get("org_id")
        return has_org_access(request.user, org_id)
