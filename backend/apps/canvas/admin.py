"""
Admin for canvas app.
"""
from django.contrib import admin

from apps.canvas.models import (
    Canvas,
    CanvasEdge,
    CanvasNode,
    FacebookAdNode,
    ImageNode,
    Thread,
    TikTokNode,
    TwitterNode,
    WebsiteNode,
    YoutubeNode,
)


@admin.register(Canvas)
class CanvasAdmin(admin.ModelAdmin):
    """Admin for Canvas."""

    list_display = ["id", "organization", "title", "created_by", "updated_at"]
    list_filter = ["organization"]
    search_fields = ["organization__name", "title"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(CanvasNode)
class CanvasNodeAdmin(admin.ModelAdmin):
    list_display = ["id", "canvas", "node_type", "position_x", "position_y", "parent_group", "updated_at"]
    list_filter = ["node_type", "organization"]
    search_fields = ["canvas__title", "payload_id"]
    readonly_fields = ["id", "payload_id", "created_at", "updated_at"]


@admin.register(CanvasEdge)
class CanvasEdgeAdmin(admin.ModelAdmin):
    list_display = ["id", "canvas", "source", "target", "created_at"]
    readonly_fields = ["id", "created_at", "updated_at"]


@admin.register(Thread)
class ThreadAdmin(admin.ModelAdmin):
    list_display = ["id", "organization", "canvas", "title", "agent_thread_id", "updated_at"]
    search_fields = ["title", "agent_thread_id"]


@admin.register(YoutubeNode, TikTokNode, TwitterNode, WebsiteNode, FacebookAdNode, ImageNode)
class EnrichedNodeAdmin(admin.ModelAdmin):
    """Read-mostly view of enrichment state for payloads that enrich."""

    list_display = ["id", "status", "error", "updated_at"]
    list_filter = ["status"]
    readonly_fields = ["id", "status", "error", "created_at", "updated_at"]
