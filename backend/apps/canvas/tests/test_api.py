"""
Tests for canvas REST APIs.
"""
from __future__ import annotations

import pytest
from django.urls import reverse
from model_bakery import baker
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APIClient

from apps.canvas.models import Canvas, CanvasEdge, CanvasNode, NodeType, TextNode


def node_url(org, canvas, name="list", pk=None):
    kwargs = {"org_id": str(org.id), "canvas_id": str(canvas.id)}
    if pk is not None:
        kwargs["pk"] = str(pk)
    return reverse(f"canvas-node-{name}", kwargs=kwargs)


@pytest.mark.django_db
class TestCanvasAPI:
    def test_create_list_update_delete_canvas(self, api_client, org):
        url = reverse("canvas-list", kwargs={"org_id": str(org.id)})

        response = api_client.post(url, {"title": "Launch research"}, format="json")
        assert response.status_code == status.HTTP_201_CREATED, f"Response: {response.data}"
        canvas_id = response.data["id"]

        response = api_client.get(url)
        assert response.status_code == status.HTTP_200_OK
        assert [c["id"] for c in response.data["results"]] == [canvas_id]

        detail = reverse("canvas-detail", kwargs={"org_id": str(org.id), "pk": canvas_id})
        response = api_client.patch(detail, {"description": "Q3"}, format="json")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["description"] == "Q3"

        response = api_client.delete(detail)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Canvas.objects.filter(id=canvas_id).exists()

    def test_non_member_forbidden(self, org, other_org, user):
        client = APIClient()
        client.credentials(HTTP_AUTHORIZATION=f"Token {Token.objects.create(user=user).key}")
        response = client.get(reverse("canvas-list", kwargs={"org_id": str(other_org.id)}))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unauthenticated(self, org):
        response = APIClient().get(reverse("canvas-list", kwargs={"org_id": str(org.id)}))
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_canvas_of_other_org_via_own_org_url(self, api_client, org, other_org):
        foreign = baker.make(Canvas, organization=other_org)
        detail = reverse("canvas-detail", kwargs={"org_id": str(org.id), "pk": str(foreign.id)})
        response = api_client.get(detail)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data == {"error": "Canvas not found or unauthorized"}

    @pytest.mark.parametrize("name", ["detail", "graph", "threads"])
    def test_malformed_canvas_id_not_found(self, api_client, org, name):
        url = reverse(f"canvas-{name}", kwargs={"org_id": str(org.id), "pk": "not-a-uuid"})
        response = api_client.get(url)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {"error": "Canvas not found"}

    def test_graph(self, api_client, org, canvas, make_node):
        text = make_node(NodeType.TEXT, content="hello")
        chat = make_node(NodeType.CHAT)
        CanvasEdge.objects.create(
            organization=org,
            canvas=canvas,
            source=text.canvas_node,
            target=chat.canvas_node,
        )

        url = reverse("canvas-graph", kwargs={"org_id": str(org.id), "pk": str(canvas.id)})
        response = api_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        nodes = {n["id"]: n for n in response.data["nodes"]}
        text_node = nodes[str(text.canvas_node_id)]
        assert text_node["data"] == {"node_id": str(text.typed_node_id)}
        assert text_node["payload"]["content"] == "hello"
        assert nodes[str(chat.canvas_node_id)]["payload"]["selected_thread"]["title"] == "Chat Thread 1"
        assert len(response.data["edges"]) == 1

    def test_threads(self, api_client, org, canvas):
        url = reverse("canvas-threads", kwargs={"org_id": str(org.id), "pk": str(canvas.id)})
        response = api_client.post(url, {}, format="json")
        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["title"] == "Chat Thread 1"
        assert len(api_client.get(url).data) == 1


@pytest.mark.django_db
class TestNodeAPI:
    def test_create_text_node(self, api_client, org, canvas):
        response = api_client.post(
            node_url(org, canvas),
            {"node_type": "text", "position": {"x": 5, "y": 6}, "content": "hi"},
            format="json",
        )
        assert response.status_code == status.HTTP_201_CREATED, f"Response: {response.data}"
        assert response.data["position"] == {"x": 5.0, "y": 6.0}
        assert response.data["payload"]["content"] == "hi"

    def test_create_invalid_url(self, api_client, org, canvas):
        response = api_client.post(
            node_url(org, canvas),
            {"node_type": "tiktok", "position": {"x": 0, "y": 0}, "url": "https://example.com/video"},
            format="json",
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": "Invalid TikTok URL"}
        assert CanvasNode.objects.count() == 0

    def test_create_missing_position(self, api_client, org, canvas):
        response = api_client.post(node_url(org, canvas), {"node_type": "text"}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "position" in response.data

    def test_release_into_group(self, api_client, org, canvas, make_node):
        group = make_node(NodeType.GROUP, 0, 0)
        node = make_node(NodeType.TEXT, 1000, 1000)

        response = api_client.post(
            node_url(org, canvas, "release", node.canvas_node_id),
            {"x": 50, "y": 50},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["parent_group"] == group.canvas_node_id

    def test_membership_add_and_remove(self, api_client, org, canvas, make_node):
        group = make_node(NodeType.GROUP)
        node = make_node(NodeType.TEXT)
        url = node_url(org, canvas, "membership", node.canvas_node_id)

        response = api_client.post(url, {"group_id": str(group.canvas_node_id)}, format="json")
        assert response.status_code == status.HTTP_200_OK
        assert response.data["parent_group"] == group.canvas_node_id

        children = api_client.get(node_url(org, canvas, "children", group.canvas_node_id))
        assert [c["id"] for c in children.data] == [str(node.canvas_node_id)]

        response = api_client.delete(url)
        assert response.data["parent_group"] is None

    def test_text_and_notes(self, api_client, org, canvas, make_node):
        node = make_node(NodeType.TEXT, content="a")

        response = api_client.patch(node_url(org, canvas, "text", node.canvas_node_id), {"content": "b"}, format="json")
        assert response.status_code == status.HTTP_200_OK
        assert TextNode.objects.get(id=node.typed_node_id).content == "b"

        response = api_client.patch(node_url(org, canvas, "notes", node.canvas_node_id), {"notes": "n"}, format="json")
        assert response.data["notes"] == "n"

    def test_context_and_chat(self, api_client, org, canvas, make_node):
        text = make_node(NodeType.TEXT, content="hello")
        chat = make_node(NodeType.CHAT)
        api_client.post(
            reverse("canvas-edge-list", kwargs={"org_id": str(org.id), "canvas_id": str(canvas.id)}),
            {"source": str(text.canvas_node_id), "target": str(chat.canvas_node_id)},
            format="json",
        )

        response = api_client.get(node_url(org, canvas, "context", chat.canvas_node_id))
        assert response.data["blocks"] == [{"role": "system", "content": "Context from connected text node:\nhello"}]

        response = api_client.get(node_url(org, canvas, "chat", chat.canvas_node_id))
        assert response.data["thread"]["title"] == "Chat Thread 1"
        assert response.data["system_prompt"] == "Context from connected text node:\nhello"

    def test_delete_group_with_children(self, api_client, org, canvas, make_node):
        group = make_node(NodeType.GROUP)
        member = make_node(NodeType.TEXT)
        CanvasNode.objects.filter(id=member.canvas_node_id).update(parent_group_id=group.canvas_node_id)

        url = node_url(org, canvas, "detail", group.canvas_node_id)
        response = api_client.delete(f"{url}?delete_children=true")

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert CanvasNode.objects.filter(canvas=canvas).count() == 0

    def test_malformed_node_id_not_found(self, api_client, org, canvas):
        response = api_client.get(node_url(org, canvas, "detail", "not-a-uuid"))
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data == {"error": "Node not found"}

    def test_malformed_edge_endpoint_not_found(self, api_client, org, canvas, make_node):
        url = reverse("canvas-edge-list", kwargs={"org_id": str(org.id), "canvas_id": str(canvas.id)})
        response = api_client.post(url, {"source": "abc", "target": str(make_node().canvas_node_id)}, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "source" in response.data

    def test_node_on_other_canvas_not_found(self, api_client, org, canvas, make_node):
        elsewhere = baker.make(Canvas, organization=org)
        node = make_node(NodeType.TEXT, target_canvas=elsewhere)
        response = api_client.get(node_url(org, canvas, "detail", node.canvas_node_id))
        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestEdgeAPI:
    def test_create_duplicate_and_delete(self, api_client, org, canvas, make_node):
        a = make_node()
        b = make_node()
        url = reverse("canvas-edge-list", kwargs={"org_id": str(org.id), "canvas_id": str(canvas.id)})
        body = {"source": str(a.canvas_node_id), "target": str(b.canvas_node_id)}

        response = api_client.post(url, body, format="json")
        assert response.status_code == status.HTTP_201_CREATED
        edge_id = response.data["id"]

        response = api_client.post(url, body, format="json")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data == {"error": "Edge already exists between these nodes"}

        detail = reverse(
            "canvas-edge-detail",
            kwargs={"org_id": str(org.id), "canvas_id": str(canvas.id), "pk": edge_id},
        )
        assert api_client.delete(detail).status_code == status.HTTP_204_NO_CONTENT
        assert CanvasEdge.objects.count() == 0


@pytest.mark.django_db
def test_run_tool_endpoint(api_client, org, canvas):
    url = reverse(
        "canvas-tool",
        kwargs={"org_id": str(org.id), "canvas_id": str(canvas.id), "tool_name": "canvas_create_text_node"},
    )
    response = api_client.post(url, {"content": "from the model"}, format="json")
    assert response.status_code == status.HTTP_200_OK
    assert response.data["status"] == "success"

    response = api_client.post(url, {"content": 5}, format="json")
    assert response.status_code == status.HTTP_400_BAD_REQUEST
