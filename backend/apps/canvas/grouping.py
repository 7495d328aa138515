"""
Containment engine: geometric group membership.

On drag-release a node joins the first group (in list order) whose rectangle
contains the node's center point. Overlapping groups are not ranked by area
or z-order.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from django.db import transaction

from apps.canvas.models import CanvasNode, NodeType
from apps.canvas.services import (
    coerce_position,
    delete_node_records,
    get_node,
    touch_canvas,
)
from libs.common.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_NODE_SIZE = (400.0, 300.0)
DEFAULT_GROUP_SIZE = (600.0, 400.0)


def center_point(x: float, y: float, width: float | None, height: float | None) -> tuple[float, float]:
    """Center of a node rectangle, using the default node size for unset dimensions."""
    w = width or DEFAULT_NODE_SIZE[0]
    h = height or DEFAULT_NODE_SIZE[1]
    return x + w / 2, y + h / 2


def contains_point(group: CanvasNode, point: tuple[float, float]) -> bool:
    """Inclusive bounds test against the group's stored rectangle."""
    w = group.width or DEFAULT_GROUP_SIZE[0]
    h = group.height or DEFAULT_GROUP_SIZE[1]
    px, py = point
    return (
        group.position_x <= px <= group.position_x + w
        and group.position_y <= py <= group.position_y + h
    )


def find_containing_group(
    point: tuple[float, float],
    groups: Iterable[CanvasNode],
    *,
    exclude_id=None,
) -> CanvasNode | None:
    """Return the first group containing the point, or None."""
    for group in groups:
        if exclude_id is not None and group.id == exclude_id:
            continue
        if contains_point(group, point):
            return group
    return None


def release_node(*, organization_id, canvas_node_id, position: dict[str, Any]) -> CanvasNode:
    """
    Drag-release: persist the position and assign group membership.

    Group nodes are never grouped; they just move. A node dropped outside
    every group only has its position persisted; ungrouping is explicit
    (remove_from_group).

    Returns:
        The updated CanvasNode (``parent_group_id`` reflects the outcome)
    """
    x, y = coerce_position(position)
    with transaction.atomic():
        node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id, for_update=True)
        node.position_x = x
        node.position_y = y
        update_fields = ["position_x", "position_y", "updated_at"]

        if node.node_type != NodeType.GROUP:
            groups = CanvasNode.objects.filter(
                canvas_id=node.canvas_id,
                node_type=NodeType.GROUP,
            ).order_by("created_at")
            point = center_point(x, y, node.width, node.height)
            group = find_containing_group(point, groups, exclude_id=node.id)
            if group is not None:
                node.parent_group = group
                update_fields.append("parent_group")
                logger.info(
                    f"Node {node.id} dropped into group {group.id}",
                    extra={"canvas_id": str(node.canvas_id)},
                )

        node.save(update_fields=update_fields)
    return node


def add_to_group(*, organization_id, canvas_node_id, group_node_id) -> CanvasNode:
    """Explicitly make a node a member of a group on the same canvas."""
    if str(canvas_node_id) == str(group_node_id):
        raise ValidationError("Cannot add a group to itself")
    with transaction.atomic():
        node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id, for_update=True)
        group = get_node(organization_id=organization_id, canvas_node_id=group_node_id)
        if group.node_type != NodeType.GROUP:
            raise ValidationError("Parent node must be a group")
        if node.node_type == NodeType.GROUP:
            raise ValidationError("Groups cannot be nested")
        if node.canvas_id != group.canvas_id:
            raise ValidationError("Node and group must be on the same canvas")
        node.parent_group = group
        node.save(update_fields=["parent_group", "updated_at"])
        touch_canvas(node.canvas_id)
    return node


def remove_from_group(*, organization_id, canvas_node_id) -> CanvasNode:
    """Ungroup a node; it re-enters top-level traversal at its last position."""
    node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
    if node.parent_group_id is not None:
        node.parent_group = None
        node.save(update_fields=["parent_group", "updated_at"])
        touch_canvas(node.canvas_id)
    return node


def group_children(*, organization_id, group_node_id):
    group = get_node(organization_id=organization_id, canvas_node_id=group_node_id)
    if group.node_type != NodeType.GROUP:
        raise ValidationError("Node is not a group")
    return CanvasNode.objects.filter(parent_group=group).order_by("created_at")


def delete_group(*, organization_id, group_node_id, delete_children: bool = False) -> int:
    """
    Delete a group node.

    Args:
        delete_children: Delete member nodes (with payloads and edges) too;
            otherwise they are ungrouped

    Returns:
        Number of member nodes affected
    """
    with transaction.atomic():
        group = get_node(organization_id=organization_id, canvas_node_id=group_node_id, for_update=True)
        if group.node_type != NodeType.GROUP:
            raise ValidationError("Node is not a group")
        children = list(CanvasNode.objects.filter(parent_group=group))
        for child in children:
            if delete_children:
                delete_node_records(child)
            else:
                child.parent_group = None
                child.save(update_fields=["parent_group", "updated_at"])
        canvas_id = group.canvas_id
        delete_node_records(group)
        touch_canvas(canvas_id)
    logger.info(
        f"Deleted group {group_node_id} ({len(children)} members, delete_children={delete_children})",
        extra={"org_id": str(organization_id), "canvas_id": str(canvas_id)},
    )
    return len(children)
