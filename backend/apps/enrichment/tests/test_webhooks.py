"""
Tests for the image generation callback endpoint.
"""
from __future__ import annotations

import json
import uuid

import pytest
from django.core.files.storage import default_storage
from django.urls import reverse
from model_bakery import baker
from rest_framework import status
from rest_framework.test import APIClient

from apps.canvas.models import EnrichmentStatus, ImageNode
from apps.enrichment import webhooks

RESULT_URL = "https://tempfile.example.org/generated/out.png"


def success_body(url=RESULT_URL):
    return {
        "code": 200,
        "msg": "success",
        "data": {
            "taskId": "task-1",
            "state": "success",
            "resultJson": json.dumps({"resultUrls": [url] if url else []}),
        },
    }


@pytest.fixture
def image(org):
    return baker.make(
        ImageNode,
        organization=org,
        prompt="a lighthouse",
        status=EnrichmentStatus.PROCESSING,
        provider_task_id="task-1",
    )


@pytest.fixture
def post_callback():
    client = APIClient()

    def _post(node_id, body):
        url = reverse("enrichment:image-callback")
        query = f"?nodeId={node_id}" if node_id is not None else ""
        return client.post(f"{url}{query}", body, format="json")

    return _post


@pytest.mark.django_db
class TestImageCallback:
    def test_success_stores_image(self, image, post_callback, fake_providers):
        fake_providers.add("GET", RESULT_URL, content=b"\x89PNG", headers={"content-type": "image/png"})

        response = post_callback(image.id, success_body())

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Success"}
        image.refresh_from_db()
        assert image.status == EnrichmentStatus.COMPLETED
        assert image.image_ref.startswith("images/")
        assert (image.width, image.height) == (1024, 1024)

    def test_duplicate_success_is_idempotent(self, image, post_callback, fake_providers):
        fake_providers.add("GET", RESULT_URL, content=b"\x89PNG", headers={"content-type": "image/png"})
        post_callback(image.id, success_body())
        image.refresh_from_db()
        first_ref = image.image_ref

        response = post_callback(image.id, success_body())

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Already completed"}
        image.refresh_from_db()
        assert image.image_ref == first_ref
        assert len(fake_providers.requests_to("tempfile.example.org")) == 1

    def test_fail_state(self, image, post_callback):
        body = {"code": 200, "data": {"taskId": "task-1", "state": "fail", "failMsg": "Prompt rejected"}}

        response = post_callback(image.id, body)

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Failure recorded"}
        image.refresh_from_db()
        assert (image.status, image.error) == (EnrichmentStatus.FAILED, "Prompt rejected")

    def test_provider_error_code(self, image, post_callback):
        response = post_callback(image.id, {"code": 501, "msg": "Generation failed upstream"})

        assert response.status_code == status.HTTP_200_OK
        image.refresh_from_db()
        assert (image.status, image.error) == (EnrichmentStatus.FAILED, "Generation failed upstream")

    def test_unknown_state_leaves_node_alone(self, image, post_callback):
        response = post_callback(image.id, {"code": 200, "data": {"taskId": "task-1", "state": "generating"}})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"message": "Unknown state"}
        image.refresh_from_db()
        assert image.status == EnrichmentStatus.PROCESSING

    def test_missing_result_url(self, image, post_callback):
        response = post_callback(image.id, success_body(url=None))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"message": "Missing image URL in response"}
        image.refresh_from_db()
        assert image.status == EnrichmentStatus.PROCESSING

    def test_download_failure_is_recorded(self, image, post_callback, fake_providers):
        response = post_callback(image.id, success_body())

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Failure recorded"}
        image.refresh_from_db()
        assert image.status == EnrichmentStatus.FAILED
        assert image.error == "Download failed: 404 Not Found"

    def test_failure_after_completion_is_ignored(self, org, post_callback):
        done = baker.make(
            ImageNode,
            organization=org,
            prompt="p",
            status=EnrichmentStatus.COMPLETED,
            image_ref="images/existing.png",
        )

        post_callback(done.id, {"code": 501, "msg": "late"})

        done.refresh_from_db()
        assert (done.status, done.error) == (EnrichmentStatus.COMPLETED, None)

    def test_success_after_failure_stores_nothing(self, org, post_callback, fake_providers):
        failed = baker.make(
            ImageNode,
            organization=org,
            prompt="p",
            status=EnrichmentStatus.FAILED,
            error="Generation timed out",
        )
        fake_providers.add("GET", RESULT_URL, content=b"\x89PNG", headers={"content-type": "image/png"})

        response = post_callback(failed.id, success_body())

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Already failed"}
        assert fake_providers.requests_to("tempfile.example.org") == []
        failed.refresh_from_db()
        assert (failed.status, failed.image_ref) == (EnrichmentStatus.FAILED, None)

    def test_refused_completion_removes_stored_blob(self, image, post_callback, fake_providers, mocker):
        fake_providers.add("GET", RESULT_URL, content=b"\x89PNG", headers={"content-type": "image/png"})
        store_spy = mocker.spy(webhooks, "store_remote_blob")
        mocker.patch("apps.enrichment.webhooks.finalize", return_value=False)

        response = post_callback(image.id, success_body())

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {"message": "Already finalized"}
        assert not default_storage.exists(store_spy.spy_return)
        image.refresh_from_db()
        assert image.image_ref is None

    def test_unknown_node(self, db, post_callback):
        response = post_callback(uuid.uuid4(), success_body())
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {"error": "Image node not found"}

    def test_malformed_body(self, image, post_callback):
        response = post_callback(image.id, {"code": "not-a-number"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": "Malformed callback body"}

    @pytest.mark.parametrize(
        "node_id,error",
        [(None, "Missing nodeId parameter"), ("not-a-uuid", "Invalid nodeId parameter")],
    )
    def test_bad_node_id(self, db, post_callback, node_id, error):
        response = post_callback(node_id, success_body())
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": error}
