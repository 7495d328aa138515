"""
Shared test fixtures for canvas app.
"""
from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model
from model_bakery import baker
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from apps.canvas import services
from apps.canvas.models import Canvas, NodeType
from apps.tenants.models import Organization, OrganizationMembership
from libs.blobstore import reset_blobstore


@pytest.fixture(autouse=True)
def fresh_blobstore():
    reset_blobstore()
    yield
    reset_blobstore()


@pytest.fixture
def org(db):
    """Create test organization."""
    return baker.make(Organization, name="TestOrg")


@pytest.fixture
def other_org(db):
    return baker.make(Organization, name="OtherOrg")


@pytest.fixture
def canvas(org):
    return baker.make(Canvas, organization=org, title="Research")


@pytest.fixture
def user(org):
    """User with an active membership in ``org``."""
    user = get_user_model().objects.create_user(username="tester", password="testpass123")
    OrganizationMembership.objects.create(user=user, organization=org, role="owner")
    return user


@pytest.fixture
def api_client(user):
    """Token-authenticated API client."""
    token = Token.objects.create(user=user)
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Token {token.key}")
    return client


@pytest.fixture
def make_node(org, canvas):
    """Create a node through the Graph Mutation API."""

    def _make(node_type=NodeType.TEXT, x=0, y=0, *, target_canvas=None, **kwargs):
        width = kwargs.pop("width", None)
        height = kwargs.pop("height", None)
        target_canvas = target_canvas or canvas
        return services.create_node(
            organization_id=target_canvas.organization_id,
            canvas_id=target_canvas.id,
            node_type=node_type,
            position={"x": x, "y": y},
            args=kwargs,
            width=width,
            height=height,
        )

    return _make
