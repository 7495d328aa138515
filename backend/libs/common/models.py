"""
Common model mixins and base classes.
"""
from __future__ import annotations

import uuid

from django.db import models


class TimeStamped(models.Model):
    """
    Abstract base model that provides UUID primary key and automatic timestamps.

    All models should inherit from this class to get:
    - UUID primary key (id)
    - created_at (auto_now_add=True)
    - updated_at (auto_now=True)
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class OrganizationScoped(TimeStamped):
    """
    Abstract base for records owned by an organization.

    The organization is mandatory and is compared against the caller's
    organization at every read/write boundary (see ``belongs_to``).
    """

    organization = models.ForeignKey(
        "tenants.Organization",
        on_delete=models.CASCADE,
        related_name="+",
    )

    class Meta:
        abstract = True

    def belongs_to(self, organization_id) -> bool:
        """Return True if the record is owned by the given organization."""
        return str(self.organization_id) == str(organization_id)
