"""
Serializers for tenants app.
"""
from __future__ import annotations

from rest_framework import serializers

from apps.tenants.models import Organization


class OrganizationSerializer(serializers.ModelSerializer):
    """Serializer for Organization, with the caller's role."""

    role = serializers.SerializerMethodField()

    class Meta:
        model = Organization
        fields = ["id", "name", "role", "created_at", "updated_at"]
        read_only_fields = fields

    def get_role(self, obj: Organization) -> str | None:
        roles = self.context.get("roles") or {}
        return roles.get(obj.id)
