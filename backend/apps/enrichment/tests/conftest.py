"""
Shared test fixtures for enrichment app.
"""
from __future__ import annotations

import httpx
import pytest
from model_bakery import baker

from apps.canvas import services
from apps.canvas.models import Canvas
from apps.tenants.models import Organization
from libs.blobstore import reset_blobstore
from libs.tasks import reset_task_queue


@pytest.fixture(autouse=True)
def fresh_singletons():
    reset_blobstore()
    reset_task_queue()
    yield
    reset_blobstore()
    reset_task_queue()


@pytest.fixture
def org(db):
    return baker.make(Organization, name="TestOrg")


@pytest.fixture
def canvas(org):
    return baker.make(Canvas, organization=org, title="Enrichment")


class FakeProviders:
    """
    Routes provider requests to canned responses.

    Keys are ``"<METHOD> <host><path>"``; values are an ``httpx.Response`` or a
    callable taking the request. Unrouted requests get a 404.
    """

    def __init__(self):
        self.routes: dict[str, object] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, response=None, *, json=None, status_code: int = 200, content=None, headers=None):
        target = httpx.URL(url)
        if response is None:
            response = httpx.Response(status_code, json=json, content=content, headers=headers)
        self.routes[f"{method} {target.host}{target.path}"] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(f"{request.method} {request.url.host}{request.url.path}")
        if route is None:
            return httpx.Response(404, json={"error": "not routed"})
        if callable(route):
            return route(request)
        return route

    def requests_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def fake_providers(mocker):
    """Patch the provider client factory with an httpx.MockTransport."""
    fake = FakeProviders()
    transport = httpx.MockTransport(fake.handler)
    mocker.patch(
        "apps.enrichment.providers.http_client",
        side_effect=lambda timeout=None: httpx.Client(transport=transport),
    )
    return fake


@pytest.fixture
def create_node(org, canvas, django_capture_on_commit_callbacks):
    """Create a node and run its enrichment job (queue is eager under test settings)."""

    def _create(node_type, **args):
        with django_capture_on_commit_callbacks(execute=True):
            created = services.create_node(
                organization_id=org.id,
                canvas_id=canvas.id,
                node_type=node_type,
                position={"x": 0, "y": 0},
                args=args,
            )
        created.payload.refresh_from_db()
        return created.payload

    return _create
