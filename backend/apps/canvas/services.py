"""
Graph Mutation API: canvases, nodes and edges.

Every function takes the caller's organization explicitly and checks it
against the records it reads or writes. Multi-record mutations run in one
transaction; enrichment jobs are scheduled on commit.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Any

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from apps.canvas.models import Canvas, CanvasEdge, CanvasNode, NodeType
from apps.canvas.registry import get_node_spec
from libs.common.errors import NotFound, Unauthorized, ValidationError
from libs.tasks import run_after

logger = logging.getLogger(__name__)


@dataclass
class CreatedNode:
    canvas_node: CanvasNode
    payload: Any

    @property
    def canvas_node_id(self):
        return self.canvas_node.id

    @property
    def typed_node_id(self):
        return self.payload.id


@dataclass
class CanvasGraph:
    canvas: Canvas
    nodes: list[CanvasNode] = field(default_factory=list)
    payloads: dict[Any, Any] = field(default_factory=dict)  # payload_id -> payload
    edges: list[CanvasEdge] = field(default_factory=list)

    @property
    def top_level_nodes(self) -> list[CanvasNode]:
        return [n for n in self.nodes if n.parent_group_id is None]


# Lookups


def first_by_id(queryset, record_id):
    """Row with this primary key, or None (also for ids that are not valid UUIDs)."""
    try:
        return queryset.filter(id=record_id).first()
    except DjangoValidationError:
        return None


def get_canvas(*, organization_id, canvas_id, for_update: bool = False) -> Canvas:
    """
    Load a canvas owned by the organization.

    Raises:
        NotFound: If the canvas does not exist
        Unauthorized: If it belongs to another organization
    """
    qs = Canvas.objects.select_for_update() if for_update else Canvas.objects.all()
    canvas = first_by_id(qs, canvas_id)
    if canvas is None:
        raise NotFound("Canvas not found")
    if not canvas.belongs_to(organization_id):
        raise Unauthorized("Canvas not found or unauthorized")
    return canvas


def get_node(*, organization_id, canvas_node_id, for_update: bool = False) -> CanvasNode:
    """
    Load a canvas node owned by the organization.

    Raises:
        NotFound: If the node does not exist
        Unauthorized: If it belongs to another organization
    """
    qs = CanvasNode.objects.select_for_update() if for_update else CanvasNode.objects.all()
    node = first_by_id(qs, canvas_node_id)
    if node is None:
        raise NotFound("Node not found")
    if not node.belongs_to(organization_id):
        raise Unauthorized("Node not found or unauthorized")
    return node


def get_edge(*, organization_id, edge_id) -> CanvasEdge:
    edge = first_by_id(CanvasEdge.objects.all(), edge_id)
    if edge is None:
        raise NotFound("Edge not found")
    if not edge.belongs_to(organization_id):
        raise Unauthorized("Edge not found or unauthorized")
    return edge


def touch_canvas(canvas_id) -> None:
    """Bump the canvas's updated_at without loading it."""
    Canvas.objects.filter(id=canvas_id).update(updated_at=timezone.now())


def coerce_position(position: dict[str, Any] | None) -> tuple[float, float]:
    if not isinstance(position, dict):
        raise ValidationError("position must be an object with x and y")
    try:
        return float(position["x"]), float(position["y"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError("position must be an object with numeric x and y") from None


# Canvases


def create_canvas(*, organization_id, user=None, title: str | None = None, description: str = "") -> Canvas:
    """Create an empty canvas; the title defaults to "Canvas <date>"."""
    if not title:
        today = timezone.localdate()
        title = f"Canvas {today.strftime('%b')} {today.day}, {today.year}"
    canvas = Canvas.objects.create(
        organization_id=organization_id,
        title=title,
        description=description or "",
        created_by=user if user is not None and user.is_authenticated else None,
    )
    logger.info(
        f"Created canvas {canvas.id}",
        extra={"org_id": str(organization_id), "canvas_id": str(canvas.id)},
    )
    return canvas


def list_canvases(*, organization_id):
    return Canvas.objects.filter(organization_id=organization_id).order_by("-updated_at")


def update_canvas(*, organization_id, canvas_id, title: str | None = None, description: str | None = None) -> Canvas:
    canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id)
    update_fields = ["updated_at"]
    if title is not None:
        if not title.strip():
            raise ValidationError("Title must not be empty")
        canvas.title = title.strip()
        update_fields.append("title")
    if description is not None:
        canvas.description = description
        update_fields.append("description")
    canvas.save(update_fields=update_fields)
    return canvas


def delete_canvas(*, organization_id, canvas_id) -> None:
    """
    Delete a canvas with all its nodes, typed payloads and edges.

    Edges and nodes go through the FK cascade; payloads are removed by the
    CanvasNode post_delete receiver inside the same transaction.
    """
    with transaction.atomic():
        canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id, for_update=True)
        node_count = canvas.nodes.count()
        CanvasEdge.objects.filter(canvas=canvas).delete()
        # Groups first would SET_NULL their children; delete children first instead
        CanvasNode.objects.filter(canvas=canvas, parent_group__isnull=False).delete()
        CanvasNode.objects.filter(canvas=canvas).delete()
        canvas.delete()
    logger.info(
        f"Deleted canvas {canvas_id} with {node_count} nodes",
        extra={"org_id": str(organization_id), "canvas_id": str(canvas_id)},
    )


def get_canvas_graph(*, organization_id, canvas_id) -> CanvasGraph:
    """Load a canvas with every node, its typed payload and every edge."""
    canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id)
    nodes = list(canvas.nodes.all())
    graph = CanvasGraph(canvas=canvas, nodes=nodes, edges=list(canvas.edges.all()))

    ids_by_type: dict[str, list] = {}
    for node in nodes:
        ids_by_type.setdefault(node.node_type, []).append(node.payload_id)
    for node_type, ids in ids_by_type.items():
        model = get_node_spec(node_type).payload_model
        for payload in model.objects.filter(id__in=ids):
            graph.payloads[payload.id] = payload
    return graph


# Nodes


def create_node(
    *,
    organization_id,
    canvas_id,
    node_type: str,
    position: dict[str, Any],
    args: dict[str, Any] | None = None,
    width: float | None = None,
    height: float | None = None,
) -> CreatedNode:
    """
    Create a typed payload and its CanvasNode in one transaction.

    Enriching types start in ``pending`` and get their job scheduled once the
    transaction commits.

    Args:
        organization_id: Caller's organization
        canvas_id: Target canvas
        node_type: One of NodeType
        position: {"x": ..., "y": ...}
        args: Type-specific arguments (url, ad_id, prompt, content, title, ...)
        width: Optional width override (type default otherwise)
        height: Optional height override

    Returns:
        CreatedNode with the CanvasNode and the typed payload

    Raises:
        NotFound: Canvas missing
        Unauthorized: Canvas owned by another organization
        ValidationError: Unknown type, bad position, or bad type-specific args
    """
    spec = get_node_spec(node_type)
    x, y = coerce_position(position)

    with transaction.atomic():
        canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id)
        payload = spec.create_payload(canvas=canvas, args=args or {})
        canvas_node = CanvasNode.objects.create(
            canvas=canvas,
            organization_id=canvas.organization_id,
            node_type=spec.node_type,
            position_x=x,
            position_y=y,
            width=width if width is not None else spec.default_width,
            height=height if height is not None else spec.default_height,
            payload_id=payload.id,
        )
        touch_canvas(canvas.id)
        if spec.enrichment_job:
            transaction.on_commit(partial(run_after, 0, spec.enrichment_job, str(payload.id)))

    logger.info(
        f"Created {spec.node_type} node {canvas_node.id}",
        extra={
            "org_id": str(organization_id),
            "canvas_id": str(canvas_id),
            "canvas_node_id": str(canvas_node.id),
            "typed_node_id": str(payload.id),
        },
    )
    return CreatedNode(canvas_node=canvas_node, payload=payload)


def update_position(*, organization_id, canvas_node_id, position: dict[str, Any]) -> CanvasNode:
    """Persist a node's position; grouping is a separate step (grouping.release_node)."""
    x, y = coerce_position(position)
    node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
    node.position_x = x
    node.position_y = y
    node.save(update_fields=["position_x", "position_y", "updated_at"])
    return node


def resize_node(*, organization_id, canvas_node_id, width: float, height: float) -> CanvasNode:
    if width is None or height is None or width <= 0 or height <= 0:
        raise ValidationError("width and height must be positive")
    node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
    node.width = width
    node.height = height
    node.save(update_fields=["width", "height", "updated_at"])
    return node


def update_notes(*, organization_id, canvas_node_id, notes: str) -> CanvasNode:
    node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
    node.notes = notes or ""
    node.save(update_fields=["notes", "updated_at"])
    touch_canvas(node.canvas_id)
    return node


def update_text(*, organization_id, canvas_node_id, content: str):
    """Replace a text node's content. Only valid for text nodes."""
    with transaction.atomic():
        node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
        if node.node_type != NodeType.TEXT:
            raise ValidationError("Node is not a text node")
        payload = node.get_payload()
        if payload is None:
            raise NotFound("Text node not found")
        payload.content = content or ""
        payload.save(update_fields=["content", "updated_at"])
        touch_canvas(node.canvas_id)
    return payload


def update_group(*, organization_id, canvas_node_id, title: str | None = None, color: str | None = None):
    """Rename or recolor a group. Only valid for group nodes."""
    with transaction.atomic():
        node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
        if node.node_type != NodeType.GROUP:
            raise ValidationError("Node is not a group")
        payload = node.get_payload()
        if payload is None:
            raise NotFound("Group not found")
        update_fields = ["updated_at"]
        if title is not None:
            payload.title = title
            update_fields.append("title")
        if color is not None:
            payload.color = color
            update_fields.append("color")
        payload.save(update_fields=update_fields)
        touch_canvas(node.canvas_id)
    return payload


def delete_node_records(node: CanvasNode) -> None:
    CanvasEdge.objects.filter(Q(source=node) | Q(target=node)).delete()
    get_node_spec(node.node_type).payload_model.objects.filter(id=node.payload_id).delete()
    node.delete()


def delete_node(*, organization_id, canvas_node_id) -> None:
    """
    Delete a node: incident edges, then the typed payload, then the node.

    Members of a deleted group become top-level nodes.
    """
    with transaction.atomic():
        node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id, for_update=True)
        canvas_id = node.canvas_id
        delete_node_records(node)
        touch_canvas(canvas_id)
    logger.info(
        f"Deleted node {canvas_node_id}",
        extra={"org_id": str(organization_id), "canvas_id": str(canvas_id)},
    )


# Edges


def create_edge(
    *,
    organization_id,
    canvas_id,
    source_id,
    target_id,
    source_handle: str | None = None,
    target_handle: str | None = None,
) -> CanvasEdge:
    """
    Connect two nodes of the same canvas (source provides context to target).

    Raises:
        NotFound: Canvas, source or target missing
        Unauthorized: Any of them owned by another organization
        ValidationError: Endpoint on another canvas, or duplicate edge
    """
    with transaction.atomic():
        canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id)
        source = get_node(organization_id=organization_id, canvas_node_id=source_id)
        target = get_node(organization_id=organization_id, canvas_node_id=target_id)
        if source.canvas_id != canvas.id or target.canvas_id != canvas.id:
            raise ValidationError("Source and target must be on the same canvas")
        if CanvasEdge.objects.filter(canvas=canvas, source=source, target=target).exists():
            raise ValidationError("Edge already exists between these nodes")
        edge = CanvasEdge.objects.create(
            canvas=canvas,
            organization_id=canvas.organization_id,
            source=source,
            target=target,
            source_handle=source_handle,
            target_handle=target_handle,
        )
        touch_canvas(canvas.id)
    logger.info(
        f"Created edge {edge.id}",
        extra={"org_id": str(organization_id), "canvas_id": str(canvas_id), "edge_id": str(edge.id)},
    )
    return edge


def delete_edge(*, organization_id, edge_id) -> None:
    with transaction.atomic():
        edge = get_edge(organization_id=organization_id, edge_id=edge_id)
        canvas_id = edge.canvas_id
        edge.delete()
        touch_canvas(canvas_id)


def list_edges(*, organization_id, canvas_id):
    canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id)
    return canvas.edges.all()
