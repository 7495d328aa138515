"""
Views for tenants app.
"""
from __future__ import annotations

from rest_framework.viewsets import ReadOnlyModelViewSet

from apps.tenants.models import Organization, OrganizationMembership
from apps.tenants.serializers import OrganizationSerializer


class OrganizationViewSet(ReadOnlyModelViewSet):
    """Organizations the authenticated user is an active member of."""

    serializer_class = OrganizationSerializer

    def get_queryset(self):
        return Organization.objects.filter(
            memberships__user=self.request.user,
            memberships__is_active=True,
        ).distinct()

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["roles"] = dict(
            OrganizationMembership.objects.filter(
                user=self.request.user, is_active=True
            ).values_list("organization_id", "role")
        )
        return context
