"""
Tenant models: Organization and OrganizationMembership.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models

from libs.common.models import TimeStamped


class Organization(TimeStamped):
    """Organization owning canvases and everything on them."""

    name = models.CharField(max_length=255, unique=True)

    class Meta:
        db_table = "tenants_organization"
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name


class OrganizationMembership(TimeStamped):
    """Grants a user access to an organization's canvases."""

    ROLE_CHOICES = [
        ("owner", "Owner"),
        ("admin", "Admin"),
        ("member", "Member"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="organization_memberships",
    )
    organization = models.ForeignKey(
        "tenants.Organization",
        on_delete=models.CASCADE,
        related_name="memberships",
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default="member")
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "tenants_organizationmembership"
        ordering = ["-created_at"]
        unique_together = [["user", "organization"]]

    def __str__(self) -> str:
        return f"{self.user} - {self.organization.name} ({self.role})"
