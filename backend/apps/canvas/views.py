"""
Views for canvas app.

Views validate request bodies with serializers and delegate to the service
layer; CanvasError subclasses raised there are rendered by the project's
exception handler.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ViewSet

from apps.canvas import context, grouping, services, threads
from apps.canvas.models import NodeType
from apps.canvas.serializers import (
    CanvasEdgeSerializer,
    CanvasNodeSerializer,
    CanvasSerializer,
    CanvasWriteSerializer,
    EdgeCreateSerializer,
    GroupUpdateSerializer,
    MembershipSerializer,
    NodeCreateSerializer,
    NotesSerializer,
    PositionSerializer,
    ResizeSerializer,
    SelectThreadSerializer,
    TextContentSerializer,
    ThreadCreateSerializer,
    ThreadSerializer,
    serialize_payload,
)
from apps.canvas.tools import run_canvas_tool
from libs.common.errors import NotFound
from libs.logging.context import set_context_ids
from libs.permissions.rbac import IsOrganizationMember


class CanvasScopedMixin:
    """Common org/canvas lookups for nested canvas routes."""

    permission_classes = [IsAuthenticated, IsOrganizationMember]

    @property
    def org_id(self):
        return self.kwargs.get("org_id")

    def load_canvas(self, canvas_id):
        set_context_ids(canvas_id=str(canvas_id))
        return services.get_canvas(organization_id=self.org_id, canvas_id=canvas_id)

    def load_node(self, pk):
        node = services.get_node(organization_id=self.org_id, canvas_node_id=pk)
        canvas_id = self.kwargs.get("canvas_id")
        if canvas_id and str(node.canvas_id) != str(canvas_id):
            raise NotFound("Node not found on this canvas")
        return node


class CanvasViewSet(CanvasScopedMixin, GenericViewSet):
    """ViewSet for Canvas."""

    serializer_class = CanvasSerializer

    def get_queryset(self):
        return services.list_canvases(organization_id=self.org_id)

    def list(self, request, org_id=None):
        page = self.paginate_queryset(self.get_queryset())
        if page is not None:
            return self.get_paginated_response(CanvasSerializer(page, many=True).data)
        return Response(CanvasSerializer(self.get_queryset(), many=True).data)

    def create(self, request, org_id=None):
        serializer = CanvasWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        canvas = services.create_canvas(
            organization_id=org_id,
            user=request.user,
            title=serializer.validated_data.get("title"),
            description=serializer.validated_data.get("description", ""),
        )
        return Response(CanvasSerializer(canvas).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, org_id=None, pk=None):
        return Response(CanvasSerializer(self.load_canvas(pk)).data)

    def partial_update(self, request, org_id=None, pk=None):
        serializer = CanvasWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        canvas = services.update_canvas(
            organization_id=org_id,
            canvas_id=pk,
            title=serializer.validated_data.get("title"),
            description=serializer.validated_data.get("description"),
        )
        return Response(CanvasSerializer(canvas).data)

    def destroy(self, request, org_id=None, pk=None):
        services.delete_canvas(organization_id=org_id, canvas_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"])
    def graph(self, request, org_id=None, pk=None):
        """Full canvas state: canvas, nodes with payloads, edges."""
        set_context_ids(canvas_id=str(pk))
        graph = services.get_canvas_graph(organization_id=org_id, canvas_id=pk)
        node_serializer = CanvasNodeSerializer(graph.nodes, many=True, context={"payloads": graph.payloads})
        return Response(
            {
                "canvas": CanvasSerializer(graph.canvas).data,
                "nodes": node_serializer.data,
                "edges": CanvasEdgeSerializer(graph.edges, many=True).data,
            }
        )

    @action(detail=True, methods=["get", "post"])
    def threads(self, request, org_id=None, pk=None):
        """List or create chat threads on the canvas."""
        if request.method == "POST":
            serializer = ThreadCreateSerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            thread = threads.create_thread(
                organization_id=org_id,
                canvas_id=pk,
                title=serializer.validated_data.get("title"),
            )
            return Response(ThreadSerializer(thread).data, status=status.HTTP_201_CREATED)
        return Response(ThreadSerializer(threads.list_threads(organization_id=org_id, canvas_id=pk), many=True).data)


class CanvasNodeViewSet(CanvasScopedMixin, ViewSet):
    """Graph Mutation API for nodes of one canvas."""

    def _node_response(self, node, status_code=status.HTTP_200_OK):
        return Response(CanvasNodeSerializer(node).data, status=status_code)

    def list(self, request, org_id=None, canvas_id=None):
        graph = services.get_canvas_graph(organization_id=org_id, canvas_id=canvas_id)
        nodes = graph.nodes
        if request.query_params.get("top_level") in ("1", "true"):
            nodes = graph.top_level_nodes
        return Response(CanvasNodeSerializer(nodes, many=True, context={"payloads": graph.payloads}).data)

    def create(self, request, org_id=None, canvas_id=None):
        serializer = NodeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        set_context_ids(canvas_id=str(canvas_id))
        created = services.create_node(
            organization_id=org_id,
            canvas_id=canvas_id,
            node_type=data["node_type"],
            position=dict(data["position"]),
            args=serializer.type_args(),
            width=data.get("width"),
            height=data.get("height"),
        )
        return self._node_response(created.canvas_node, status.HTTP_201_CREATED)

    def retrieve(self, request, org_id=None, canvas_id=None, pk=None):
        return self._node_response(self.load_node(pk))

    def destroy(self, request, org_id=None, canvas_id=None, pk=None):
        node = self.load_node(pk)
        if node.node_type == NodeType.GROUP:
            delete_children = request.query_params.get("delete_children") in ("1", "true")
            grouping.delete_group(organization_id=org_id, group_node_id=node.id, delete_children=delete_children)
        else:
            services.delete_node(organization_id=org_id, canvas_node_id=node.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"])
    def position(self, request, org_id=None, canvas_id=None, pk=None):
        serializer = PositionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = self.load_node(pk)
        node = services.update_position(organization_id=org_id, canvas_node_id=node.id, position=dict(serializer.validated_data))
        return self._node_response(node)

    @action(detail=True, methods=["post"])
    def release(self, request, org_id=None, canvas_id=None, pk=None):
        """Drag-release: persist position and assign group membership."""
        serializer = PositionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = self.load_node(pk)
        node = grouping.release_node(organization_id=org_id, canvas_node_id=node.id, position=dict(serializer.validated_data))
        return self._node_response(node)

    @action(detail=True, methods=["patch"])
    def resize(self, request, org_id=None, canvas_id=None, pk=None):
        serializer = ResizeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = self.load_node(pk)
        node = services.resize_node(organization_id=org_id, canvas_node_id=node.id, **serializer.validated_data)
        return self._node_response(node)

    @action(detail=True, methods=["patch"])
    def notes(self, request, org_id=None, canvas_id=None, pk=None):
        serializer = NotesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = self.load_node(pk)
        node = services.update_notes(organization_id=org_id, canvas_node_id=node.id, notes=serializer.validated_data["notes"])
        return self._node_response(node)

    @action(detail=True, methods=["patch"])
    def text(self, request, org_id=None, canvas_id=None, pk=None):
        serializer = TextContentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = self.load_node(pk)
        payload = services.update_text(organization_id=org_id, canvas_node_id=node.id, content=serializer.validated_data["content"])
        return Response(serialize_payload(NodeType.TEXT, payload))

    @action(detail=True, methods=["patch"])
    def group(self, request, org_id=None, canvas_id=None, pk=None):
        """Rename or recolor a group node."""
        serializer = GroupUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = self.load_node(pk)
        payload = services.update_group(organization_id=org_id, canvas_node_id=node.id, **serializer.validated_data)
        return Response(serialize_payload(NodeType.GROUP, payload))

    @action(detail=True, methods=["post", "delete"])
    def membership(self, request, org_id=None, canvas_id=None, pk=None):
        """POST adds the node to a group; DELETE ungroups it."""
        node = self.load_node(pk)
        if request.method == "DELETE":
            node = grouping.remove_from_group(organization_id=org_id, canvas_node_id=node.id)
            return self._node_response(node)
        serializer = MembershipSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = grouping.add_to_group(
            organization_id=org_id,
            canvas_node_id=node.id,
            group_node_id=serializer.validated_data["group_id"],
        )
        return self._node_response(node)

    @action(detail=True, methods=["get"])
    def children(self, request, org_id=None, canvas_id=None, pk=None):
        node = self.load_node(pk)
        children = grouping.group_children(organization_id=org_id, group_node_id=node.id)
        return Response(CanvasNodeSerializer(children, many=True).data)

    @action(detail=True, methods=["get"])
    def context(self, request, org_id=None, canvas_id=None, pk=None):
        """Context blocks gathered from the node's incoming edges."""
        node = self.load_node(pk)
        blocks = context.aggregate_context(organization_id=org_id, canvas_node_id=node.id)
        return Response(
            {
                "blocks": [block.as_message() for block in blocks],
                "system_prompt": context.build_system_prompt(blocks),
            }
        )

    @action(detail=True, methods=["get"])
    def chat(self, request, org_id=None, canvas_id=None, pk=None):
        """Selected thread plus system prompt for the next chat turn."""
        node = self.load_node(pk)
        preparation = context.prepare_chat(organization_id=org_id, canvas_node_id=node.id)
        return Response(
            {
                "thread": ThreadSerializer(preparation.thread).data if preparation.thread else None,
                "blocks": [block.as_message() for block in preparation.blocks],
                "system_prompt": preparation.system_prompt,
            }
        )

    @action(detail=True, methods=["post"], url_path="select-thread")
    def select_thread(self, request, org_id=None, canvas_id=None, pk=None):
        serializer = SelectThreadSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node = self.load_node(pk)
        chat = threads.select_thread(
            organization_id=org_id,
            canvas_node_id=node.id,
            thread_id=serializer.validated_data["thread_id"],
        )
        return Response(serialize_payload(NodeType.CHAT, chat))


class CanvasEdgeViewSet(CanvasScopedMixin, ViewSet):
    """Edges of one canvas."""

    def list(self, request, org_id=None, canvas_id=None):
        edges = services.list_edges(organization_id=org_id, canvas_id=canvas_id)
        return Response(CanvasEdgeSerializer(edges, many=True).data)

    def create(self, request, org_id=None, canvas_id=None):
        serializer = EdgeCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        edge = services.create_edge(
            organization_id=org_id,
            canvas_id=canvas_id,
            source_id=data["source"],
            target_id=data["target"],
            source_handle=data.get("source_handle"),
            target_handle=data.get("target_handle"),
        )
        return Response(CanvasEdgeSerializer(edge).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, org_id=None, canvas_id=None, pk=None):
        edge = services.get_edge(organization_id=org_id, edge_id=pk)
        if str(edge.canvas_id) != str(canvas_id):
            raise NotFound("Edge not found on this canvas")
        services.delete_edge(organization_id=org_id, edge_id=pk)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([IsAuthenticated, IsOrganizationMember])
def run_tool(request, org_id=None, canvas_id=None, tool_name=None):
    """Run one AI canvas tool with the JSON body as its arguments."""
    set_context_ids(canvas_id=str(canvas_id))
    result = run_canvas_tool(
        name=tool_name,
        arguments=request.data if isinstance(request.data, dict) else {},
        organization_id=org_id,
        canvas_id=canvas_id,
    )
    status_code = status.HTTP_200_OK if result.get("status") == "success" else status.HTTP_400_BAD_REQUEST
    return Response(result, status=status_code)
