"""
Canvas graph models.

A Canvas owns CanvasNodes (positions, relations) and CanvasEdges. Each
CanvasNode points at exactly one typed payload row through ``payload_id``;
``node_type`` selects which payload table that id indexes into.
"""
from __future__ import annotations

from django.conf import settings
from django.db import models

from libs.common.models import OrganizationScoped


class NodeType(models.TextChoices):
    TEXT = "text", "Text"
    CHAT = "chat", "Chat"
    YOUTUBE = "youtube", "YouTube"
    TIKTOK = "tiktok", "TikTok"
    TWITTER = "twitter", "Twitter"
    WEBSITE = "website", "Website"
    FACEBOOK_AD = "facebook_ad", "Facebook Ad"
    IMAGE = "image", "Image"
    GROUP = "group", "Group"


class EnrichmentStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class Canvas(OrganizationScoped):
    """A named graph workspace owned by an organization."""

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="canvases",
    )

    class Meta:
        db_table = "canvas_canvas"
        ordering = ["-updated_at"]
        indexes = [
            models.Index(fields=["organization", "-updated_at"], name="canvas_org_updated_idx"),
        ]

    def __str__(self) -> str:
        return self.title


class CanvasNode(OrganizationScoped):
    """A positioned graph vertex with a type tag and a reference to its typed payload."""

    canvas = models.ForeignKey(
        "canvas.Canvas",
        on_delete=models.CASCADE,
        related_name="nodes",
    )
    node_type = models.CharField(max_length=20, choices=NodeType.choices)
    position_x = models.FloatField(default=0)
    position_y = models.FloatField(default=0)
    width = models.FloatField(null=True, blank=True)
    height = models.FloatField(null=True, blank=True)
    payload_id = models.UUIDField(
        help_text="Id of the typed payload row in the table selected by node_type",
    )
    parent_group = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
        help_text="Group node owning this node; owned nodes are not top-level",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "canvas_node"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["canvas", "node_type"], name="canvas_node_type_idx"),
            models.Index(fields=["payload_id"], name="canvas_node_payload_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.node_type}:{self.id}"

    @property
    def position(self) -> dict[str, float]:
        return {"x": self.position_x, "y": self.position_y}

    def get_payload(self):
        """Load the typed payload this node points at (None if missing)."""
        from apps.canvas.registry import get_node_spec

        model = get_node_spec(self.node_type).payload_model
        return model.objects.filter(id=self.payload_id).first()


class CanvasEdge(OrganizationScoped):
    """Directed edge; ``target`` consumes context provided by ``source``."""

    canvas = models.ForeignKey(
        "canvas.Canvas",
        on_delete=models.CASCADE,
        related_name="edges",
    )
    source = models.ForeignKey(
        "canvas.CanvasNode",
        on_delete=models.CASCADE,
        related_name="outgoing_edges",
    )
    target = models.ForeignKey(
        "canvas.CanvasNode",
        on_delete=models.CASCADE,
        related_name="incoming_edges",
    )
    source_handle = models.CharField(max_length=100, null=True, blank=True)
    target_handle = models.CharField(max_length=100, null=True, blank=True)

    class Meta:
        db_table = "canvas_edge"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["canvas"], name="canvas_edge_canvas_idx"),
            models.Index(fields=["target", "created_at"], name="canvas_edge_target_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.source_id} -> {self.target_id}"


class Thread(OrganizationScoped):
    """Binds an external conversation to a canvas; selected by at most one chat node at a time."""

    canvas = models.ForeignKey(
        "canvas.Canvas",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="threads",
    )
    agent_thread_id = models.CharField(max_length=255)
    title = models.CharField(max_length=255)

    class Meta:
        db_table = "canvas_thread"
        ordering = ["created_at"]

    def __str__(self) -> str:
        return self.title


# Typed payloads


class NodePayload(OrganizationScoped):
    """Base for typed payload tables."""

    class Meta:
        abstract = True


class EnrichedPayload(NodePayload):
    """Payload filled in by a background enrichment job."""

    status = models.CharField(
        max_length=20,
        choices=EnrichmentStatus.choices,
        default=EnrichmentStatus.PENDING,
    )
    error = models.TextField(null=True, blank=True)

    class Meta:
        abstract = True

    @property
    def is_completed(self) -> bool:
        return self.status == EnrichmentStatus.COMPLETED


class TextNode(NodePayload):
    content = models.TextField(blank=True, default="")

    class Meta:
        db_table = "canvas_text_node"


class ChatNode(NodePayload):
    canvas = models.ForeignKey(
        "canvas.Canvas",
        on_delete=models.CASCADE,
        related_name="chat_nodes",
    )
    selected_thread = models.ForeignKey(
        "canvas.Thread",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="chat_nodes",
    )

    class Meta:
        db_table = "canvas_chat_node"


class YoutubeNode(EnrichedPayload):
    url = models.URLField(max_length=2048)
    video_id = models.CharField(max_length=64)
    title = models.CharField(max_length=500, null=True, blank=True)
    thumbnail_url = models.URLField(max_length=2048, null=True, blank=True)
    transcript = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "canvas_youtube_node"


class TikTokNode(EnrichedPayload):
    url = models.URLField(max_length=2048)
    video_id = models.CharField(max_length=64, null=True, blank=True)
    title = models.TextField(null=True, blank=True)
    author = models.CharField(max_length=255, null=True, blank=True)
    transcript = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "canvas_tiktok_node"


class TwitterNode(EnrichedPayload):
    url = models.URLField(max_length=2048)
    tweet_id = models.CharField(max_length=64)
    full_text = models.TextField(null=True, blank=True)
    author_name = models.CharField(max_length=255, null=True, blank=True)
    author_username = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        db_table = "canvas_twitter_node"


class WebsiteNode(EnrichedPayload):
    url = models.URLField(max_length=2048)
    title = models.CharField(max_length=500, null=True, blank=True)
    markdown = models.TextField(null=True, blank=True)
    screenshot_ref = models.CharField(max_length=500, null=True, blank=True)

    class Meta:
        db_table = "canvas_website_node"


class FacebookAdNode(EnrichedPayload):
    MEDIA_TYPE_CHOICES = [
        ("video", "Video"),
        ("image", "Image"),
        ("none", "None"),
    ]

    ad_id = models.CharField(max_length=64)
    ad_archive_id = models.CharField(max_length=64, null=True, blank=True)
    url = models.URLField(max_length=2048, null=True, blank=True)
    title = models.TextField(null=True, blank=True)
    body = models.TextField(null=True, blank=True)
    link_description = models.TextField(null=True, blank=True)
    page_name = models.CharField(max_length=255, null=True, blank=True)
    publisher_platform = models.JSONField(default=list, blank=True)
    media_type = models.CharField(max_length=10, choices=MEDIA_TYPE_CHOICES, null=True, blank=True)
    image_refs = models.JSONField(default=list, blank=True)
    video_url = models.URLField(max_length=2048, null=True, blank=True)
    video_thumbnail_ref = models.CharField(max_length=500, null=True, blank=True)
    transcript = models.TextField(null=True, blank=True)

    class Meta:
        db_table = "canvas_facebook_ad_node"


class ImageNode(EnrichedPayload):
    prompt = models.TextField()
    is_ai_generated = models.BooleanField(default=True)
    image_ref = models.CharField(max_length=500, null=True, blank=True)
    provider_task_id = models.CharField(max_length=255, null=True, blank=True)
    width = models.PositiveIntegerField(null=True, blank=True)
    height = models.PositiveIntegerField(null=True, blank=True)

    class Meta:
        db_table = "canvas_image_node"


class GroupNode(NodePayload):
    title = models.CharField(max_length=255, default="New Group")
    color = models.CharField(max_length=64, default="rgba(100, 100, 255, 0.1)")

    class Meta:
        db_table = "canvas_group_node"
