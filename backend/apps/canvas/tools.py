"""
AI tool definitions for the Graph Mutation API.

Each tool has a JSON schema for its arguments and a handler. Arguments are
validated with jsonschema before dispatch; handlers return JSON-serializable
dicts with a ``status`` of ``success`` or ``error``.
"""
from __future__ import annotations

import logging
from typing import Any

import jsonschema
from django.db.models import F, Max

from apps.canvas import services
from apps.canvas.models import CanvasNode, NodeType
from apps.canvas.registry import get_node_spec
from libs.common.errors import CanvasError

logger = logging.getLogger(__name__)

# Horizontal gap used when a tool call does not specify a position
NODE_SPACING = 50

_POSITION_PROPERTIES = {
    "x": {"type": "number", "description": "Canvas x coordinate (defaults to right of existing nodes)"},
    "y": {"type": "number", "description": "Canvas y coordinate (defaults to 0)"},
}


def _url_tool(name: str, description: str, url_description: str) -> dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "schema": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "minLength": 1, "description": url_description},
                **_POSITION_PROPERTIES,
            },
            "required": ["url"],
            "additionalProperties": False,
        },
    }


CANVAS_TOOLS = [
    {
        "name": "canvas_create_text_node",
        "description": "Add a text note to the canvas.",
        "schema": {
            "type": "object",
            "properties": {
                "content": {"type": "string", "description": "Text content of the note"},
                **_POSITION_PROPERTIES,
            },
            "required": ["content"],
            "additionalProperties": False,
        },
    },
    _url_tool(
        "canvas_create_website_node",
        "Add a web page to the canvas. The page is scraped to markdown in the background.",
        "Page URL (http or https)",
    ),
    _url_tool(
        "canvas_create_youtube_node",
        "Add a YouTube video to the canvas. Its transcript is fetched in the background.",
        "YouTube video URL",
    ),
    _url_tool(
        "canvas_create_tiktok_node",
        "Add a TikTok video to the canvas. Its transcript is fetched in the background.",
        "TikTok video URL",
    ),
    _url_tool(
        "canvas_create_twitter_node",
        "Add a tweet to the canvas. Its text and author are fetched in the background.",
        "Tweet URL (twitter.com or x.com)",
    ),
    {
        "name": "canvas_create_facebook_ad_node",
        "description": "Add a Facebook Ad Library ad to the canvas by its numeric ad id.",
        "schema": {
            "type": "object",
            "properties": {
                "ad_id": {"type": "string", "pattern": "^[0-9]+$", "description": "Ad Library id"},
                **_POSITION_PROPERTIES,
            },
            "required": ["ad_id"],
            "additionalProperties": False,
        },
    },
    {
        "name": "canvas_generate_image",
        "description": "Generate an image from a prompt and place it on the canvas.",
        "schema": {
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "minLength": 1, "description": "Image description"},
                **_POSITION_PROPERTIES,
            },
            "required": ["prompt"],
            "additionalProperties": False,
        },
    },
    {
        "name": "canvas_connect_nodes",
        "description": "Connect two nodes so the source provides context to the target.",
        "schema": {
            "type": "object",
            "properties": {
                "source": {"type": "string", "format": "uuid", "description": "Source canvas node id"},
                "target": {"type": "string", "format": "uuid", "description": "Target canvas node id"},
            },
            "required": ["source", "target"],
            "additionalProperties": False,
        },
    },
    {
        "name": "canvas_list_nodes",
        "description": "List the nodes on the canvas with their type, position and status.",
        "schema": {
            "type": "object",
            "properties": {
                "node_type": {
                    "type": "string",
                    "enum": [choice.value for choice in NodeType],
                    "description": "Only return nodes of this type",
                },
            },
            "required": [],
            "additionalProperties": False,
        },
    },
]

TOOL_SCHEMAS = {tool["name"]: tool["schema"] for tool in CANVAS_TOOLS}


def next_free_position(canvas_id) -> dict[str, float]:
    """Position to the right of every existing node on the canvas."""
    right_edge = (
        CanvasNode.objects.filter(canvas_id=canvas_id, parent_group__isnull=True)
        .annotate(right=F("position_x") + F("width"))
        .aggregate(value=Max("right"))["value"]
    )
    if right_edge is None:
        return {"x": 0.0, "y": 0.0}
    return {"x": float(right_edge) + NODE_SPACING, "y": 0.0}


def _position(arguments: dict[str, Any], canvas_id) -> dict[str, float]:
    if "x" in arguments and "y" in arguments:
        return {"x": arguments["x"], "y": arguments["y"]}
    position = next_free_position(canvas_id)
    position.update({k: arguments[k] for k in ("x", "y") if k in arguments})
    return position


def _create_node_handler(node_type: str, arg_name: str):
    def handler(organization_id, canvas_id, **arguments: Any) -> dict[str, Any]:
        created = services.create_node(
            organization_id=organization_id,
            canvas_id=canvas_id,
            node_type=node_type,
            position=_position(arguments, canvas_id),
            args={arg_name: arguments[arg_name]},
        )
        result = {
            "status": "success",
            "canvas_node_id": str(created.canvas_node_id),
            "typed_node_id": str(created.typed_node_id),
            "node_type": node_type,
        }
        if get_node_spec(node_type).enriches:
            result["enrichment_status"] = created.payload.status
        return result

    handler.__name__ = f"create_{node_type}_node_handler"
    return handler


def connect_nodes_handler(organization_id, canvas_id, source: str, target: str, **kwargs: Any) -> dict[str, Any]:
    """Handler for canvas_connect_nodes."""
    edge = services.create_edge(
        organization_id=organization_id,
        canvas_id=canvas_id,
        source_id=source,
        target_id=target,
    )
    return {"status": "success", "edge_id": str(edge.id)}


def list_nodes_handler(organization_id, canvas_id, node_type: str | None = None, **kwargs: Any) -> dict[str, Any]:
    """Handler for canvas_list_nodes."""
    graph = services.get_canvas_graph(organization_id=organization_id, canvas_id=canvas_id)
    nodes = []
    for node in graph.nodes:
        if node_type and node.node_type != node_type:
            continue
        payload = graph.payloads.get(node.payload_id)
        nodes.append(
            {
                "id": str(node.id),
                "node_type": node.node_type,
                "position": node.position,
                "parent_group_id": str(node.parent_group_id) if node.parent_group_id else None,
                "status": getattr(payload, "status", None),
                "title": getattr(payload, "title", None),
            }
        )
    return {"status": "success", "nodes": nodes}


TOOL_HANDLERS = {
    "canvas_create_text_node": _create_node_handler(NodeType.TEXT, "content"),
    "canvas_create_website_node": _create_node_handler(NodeType.WEBSITE, "url"),
    "canvas_create_youtube_node": _create_node_handler(NodeType.YOUTUBE, "url"),
    "canvas_create_tiktok_node": _create_node_handler(NodeType.TIKTOK, "url"),
    "canvas_create_twitter_node": _create_node_handler(NodeType.TWITTER, "url"),
    "canvas_create_facebook_ad_node": _create_node_handler(NodeType.FACEBOOK_AD, "ad_id"),
    "canvas_generate_image": _create_node_handler(NodeType.IMAGE, "prompt"),
    "canvas_connect_nodes": connect_nodes_handler,
    "canvas_list_nodes": list_nodes_handler,
}


def run_canvas_tool(*, name: str, arguments: dict[str, Any], organization_id, canvas_id) -> dict[str, Any]:
    """
    Validate arguments against the tool schema and run its handler.

    Args:
        name: Tool name (one of CANVAS_TOOLS)
        arguments: Tool arguments as sent by the model
        organization_id: Caller's organization
        canvas_id: Canvas the tool operates on

    Returns:
        Handler result, or {"status": "error", "error": ..., "error_description": ...}
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        return {"status": "error", "error": "unknown_tool", "error_description": f"Unknown tool: {name}"}

    try:
        jsonschema.validate(
            instance=arguments,
            schema=TOOL_SCHEMAS[name],
            format_checker=jsonschema.FormatChecker(),
        )
    except jsonschema.ValidationError as e:
        return {"status": "error", "error": "invalid_arguments", "error_description": e.message}

    try:
        result = handler(organization_id, canvas_id, **arguments)
    except CanvasError as e:
        logger.info(
            f"Canvas tool {name} rejected: {e.message}",
            extra={"org_id": str(organization_id), "canvas_id": str(canvas_id), "tool": name},
        )
        return {"status": "error", "error": type(e).__name__, "error_description": e.message}

    logger.info(
        f"Canvas tool {name} succeeded",
        extra={"org_id": str(organization_id), "canvas_id": str(canvas_id), "tool": name},
    )
    return result
