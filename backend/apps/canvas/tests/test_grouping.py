"""
Tests for the containment engine.
"""
from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone
from model_bakery import baker

from apps.canvas import grouping
from apps.canvas.models import Canvas, CanvasNode, GroupNode, NodeType, TextNode
from libs.common.errors import Unauthorized, ValidationError


def test_center_point_uses_default_node_size():
    assert grouping.center_point(0, 0, None, None) == (200, 150)
    assert grouping.center_point(10, 20, 100, 50) == (60, 45)


def test_contains_point_is_inclusive():
    group = CanvasNode(position_x=0, position_y=0, width=600, height=400)
    assert grouping.contains_point(group, (600, 400))
    assert grouping.contains_point(group, (0, 0))
    assert not grouping.contains_point(group, (600.5, 10))


def test_contains_point_falls_back_to_default_group_size():
    group = CanvasNode(position_x=100, position_y=100, width=None, height=None)
    assert grouping.contains_point(group, (700, 500))
    assert not grouping.contains_point(group, (701, 500))


def test_find_containing_group_first_match_wins():
    first = CanvasNode(position_x=0, position_y=0, width=600, height=400)
    second = CanvasNode(position_x=100, position_y=100, width=100, height=100)
    assert grouping.find_containing_group((150, 150), [first, second]) is first
    assert grouping.find_containing_group((150, 150), [second, first]) is second
    assert grouping.find_containing_group((5000, 5000), [first, second]) is None


@pytest.mark.django_db
class TestReleaseNode:
    def test_drop_inside_group(self, org, make_node):
        group = make_node(NodeType.GROUP, 0, 0).canvas_node
        node = make_node(NodeType.TEXT, 1000, 1000).canvas_node

        released = grouping.release_node(organization_id=org.id, canvas_node_id=node.id, position={"x": 100, "y": 50})

        assert released.parent_group_id == group.id
        node.refresh_from_db()
        assert node.parent_group_id == group.id
        assert node.position == {"x": 100.0, "y": 50.0}

    def test_center_on_right_boundary_joins(self, org, make_node):
        group = make_node(NodeType.GROUP, 0, 0).canvas_node
        node = make_node(NodeType.TEXT, 1000, 1000).canvas_node

        # 400x300 node at x=400 has its center at x=600, the group's right edge
        released = grouping.release_node(organization_id=org.id, canvas_node_id=node.id, position={"x": 400, "y": 0})

        assert released.parent_group_id == group.id

    def test_drop_outside_persists_position_only(self, org, make_node):
        make_node(NodeType.GROUP, 0, 0)
        node = make_node(NodeType.TEXT, 1000, 1000).canvas_node

        released = grouping.release_node(organization_id=org.id, canvas_node_id=node.id, position={"x": 500, "y": 0})

        assert released.parent_group_id is None
        assert released.position == {"x": 500.0, "y": 0.0}

    def test_overlapping_groups_first_created_wins(self, org, make_node):
        older = make_node(NodeType.GROUP, 0, 0).canvas_node
        newer = make_node(NodeType.GROUP, 100, 100).canvas_node
        CanvasNode.objects.filter(id=older.id).update(created_at=timezone.now() - timedelta(minutes=5))
        node = make_node(NodeType.TEXT, 2000, 2000).canvas_node

        released = grouping.release_node(organization_id=org.id, canvas_node_id=node.id, position={"x": 150, "y": 100})
        assert released.parent_group_id == older.id

        CanvasNode.objects.filter(id=newer.id).update(created_at=timezone.now() - timedelta(minutes=10))
        node.parent_group = None
        node.save()
        released = grouping.release_node(organization_id=org.id, canvas_node_id=node.id, position={"x": 150, "y": 100})
        assert released.parent_group_id == newer.id

    def test_groups_are_never_grouped(self, org, make_node):
        make_node(NodeType.GROUP, 0, 0)
        dragged = make_node(NodeType.GROUP, 2000, 2000).canvas_node

        released = grouping.release_node(organization_id=org.id, canvas_node_id=dragged.id, position={"x": 10, "y": 10})

        assert released.parent_group_id is None
        assert released.position == {"x": 10.0, "y": 10.0}

    def test_groups_on_other_canvases_ignored(self, org, canvas, make_node):
        other = baker.make(Canvas, organization=org)
        make_node(NodeType.GROUP, 0, 0, target_canvas=other)
        node = make_node(NodeType.TEXT, 1000, 1000).canvas_node

        released = grouping.release_node(organization_id=org.id, canvas_node_id=node.id, position={"x": 0, "y": 0})
        assert released.parent_group_id is None

    def test_other_org_cannot_release(self, other_org, make_node):
        node = make_node().canvas_node
        with pytest.raises(Unauthorized):
            grouping.release_node(organization_id=other_org.id, canvas_node_id=node.id, position={"x": 0, "y": 0})


@pytest.mark.django_db
class TestMembership:
    def test_add_and_remove(self, org, make_node):
        group = make_node(NodeType.GROUP).canvas_node
        node = make_node().canvas_node

        grouped = grouping.add_to_group(organization_id=org.id, canvas_node_id=node.id, group_node_id=group.id)
        assert grouped.parent_group_id == group.id
        assert list(grouping.group_children(organization_id=org.id, group_node_id=group.id)) == [grouped]

        ungrouped = grouping.remove_from_group(organization_id=org.id, canvas_node_id=node.id)
        assert ungrouped.parent_group_id is None
        assert ungrouped.position == node.position

    def test_cannot_add_to_itself(self, org, make_node):
        group = make_node(NodeType.GROUP).canvas_node
        with pytest.raises(ValidationError, match="itself"):
            grouping.add_to_group(organization_id=org.id, canvas_node_id=group.id, group_node_id=group.id)

    def test_parent_must_be_group(self, org, make_node):
        a = make_node().canvas_node
        b = make_node().canvas_node
        with pytest.raises(ValidationError, match="must be a group"):
            grouping.add_to_group(organization_id=org.id, canvas_node_id=a.id, group_node_id=b.id)

    def test_groups_not_nested(self, org, make_node):
        outer = make_node(NodeType.GROUP).canvas_node
        inner = make_node(NodeType.GROUP).canvas_node
        with pytest.raises(ValidationError, match="nested"):
            grouping.add_to_group(organization_id=org.id, canvas_node_id=inner.id, group_node_id=outer.id)


@pytest.mark.django_db
class TestDeleteGroup:
    def _grouped_pair(self, org, make_node):
        group = make_node(NodeType.GROUP)
        member = make_node(NodeType.TEXT, content="inside")
        grouping.add_to_group(organization_id=org.id, canvas_node_id=member.canvas_node_id, group_node_id=group.canvas_node_id)
        return group, member

    def test_keeps_children_by_default(self, org, make_node):
        group, member = self._grouped_pair(org, make_node)

        affected = grouping.delete_group(organization_id=org.id, group_node_id=group.canvas_node_id)

        assert affected == 1
        assert not GroupNode.objects.filter(id=group.typed_node_id).exists()
        assert CanvasNode.objects.get(id=member.canvas_node_id).parent_group_id is None

    def test_delete_children(self, org, make_node):
        group, member = self._grouped_pair(org, make_node)

        grouping.delete_group(organization_id=org.id, group_node_id=group.canvas_node_id, delete_children=True)

        assert not CanvasNode.objects.filter(id=member.canvas_node_id).exists()
        assert not TextNode.objects.filter(id=member.typed_node_id).exists()

    def test_rejects_non_group(self, org, make_node):
        node = make_node().canvas_node
        with pytest.raises(ValidationError):
            grouping.delete_group(organization_id=org.id, group_node_id=node.id)
